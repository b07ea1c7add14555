"""
Contract ABIs used by the Megapot SDK (trimmed to the entries the SDK calls).
"""

SPEND_PERMISSION_MANAGER_ABI = [
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "token", "type": "address"}
        ],
        "name": "getSpendPermission",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "token", "type": "address"},
            {"name": "allowance", "type": "uint256"},
            {"name": "period", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bytes32"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "token", "type": "address"}
        ],
        "name": "revoke",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

ERC20_ABI = [
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    }
]

JACKPOT_ABI = [
    {
        "inputs": [{"name": "ticketCount", "type": "uint256"}],
        "name": "buySoloTickets",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "ticketPrice",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "lpPoolTotal",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "userPoolTotal",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "lpPoolCap",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "minLpDeposit",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "feeBps",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "lastJackpotEndTime",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "roundDurationInSeconds",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "", "type": "address"}],
        "name": "usersInfo",
        "outputs": [
            {"name": "ticketsPurchasedTotalBps", "type": "uint256"},
            {"name": "winningsClaimable", "type": "uint256"},
            {"name": "active", "type": "bool"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": False, "name": "time", "type": "uint256"},
            {"indexed": False, "name": "winner", "type": "address"},
            {"indexed": False, "name": "winningTicket", "type": "uint256"},
            {"indexed": False, "name": "winAmount", "type": "uint256"},
            {"indexed": False, "name": "ticketsPurchasedTotalBps", "type": "uint256"}
        ],
        "name": "JackpotRun",
        "type": "event"
    }
]

JACKPOT_POOL_ABI = [
    {
        "inputs": [
            {"name": "poolId", "type": "uint256"},
            {"name": "ticketCount", "type": "uint256"}
        ],
        "name": "buyPoolTickets",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "inputs": [{"name": "poolId", "type": "uint256"}],
        "name": "getPoolInfo",
        "outputs": [
            {"name": "totalTickets", "type": "uint256"},
            {"name": "ticketPrice", "type": "uint256"},
            {"name": "maxTicketsPerUser", "type": "uint256"},
            {"name": "endTime", "type": "uint256"},
            {"name": "isActive", "type": "bool"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "poolId", "type": "uint256"}],
        "name": "getUserTickets",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]

JACKPOT_RUN_EVENT = "JackpotRun"
