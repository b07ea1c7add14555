"""
Default values used by the Megapot SDK.

Users normally only supply a wallet (and optionally API keys); contract
addresses default to the Base mainnet deployment.
"""

# Network
BASE_CHAIN_ID = 8453
BASE_MAINNET_RPC_URL = "https://mainnet.base.org"
BASE_EXPLORER_URL = "https://basescan.org"

# Contract addresses (Base mainnet)
USDC_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
MEGAPOT_ADDRESS = "0xbEDd4F2beBE9E3E636161E644759f3cbe3d51B95"
JACKPOT_POOL_ADDRESS = "0xfb324c09c16b5f437ff612a4e8bc95b8fd6e6d5a"
SPEND_PERMISSION_MANAGER_ADDRESS = "0xf85210B21cC50302F477BA56686d2019dC9b67Ad"
REFERRER_ADDRESS = "0xa14ce36e7b135b66c3e3cb2584e777f32b15f5dc"

# Data API
DATA_API_BASE_URL = "https://api.megapot.io"

# SDK defaults
DEFAULT_GAS_LIMIT = 150000
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 15  # seconds
DEFAULT_RECEIPT_TIMEOUT = 120  # seconds
DEFAULT_BACKOFF_BASE = 0.5  # seconds

# Token
USDC_DECIMALS = 6

# Spend permissions
DEFAULT_SPEND_PERMISSION_PERIOD_DAYS = 30

# Paymaster (gas sponsorship)
DEFAULT_PAYMASTER_MAX_GAS = 50000
DEFAULT_PAYMASTER_ENABLED = False

# Historical settlement scan
SCAN_MAX_LOOKBACK = 43200  # blocks
SCAN_WINDOW = 5000  # blocks per getLogs query
