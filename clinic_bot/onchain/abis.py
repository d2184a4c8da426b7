POOL_ABI = [
    {"inputs": [{"name": "user", "type": "address"}],
     "name": "getUserAccountData",
     "outputs": [{"name": "totalCollateralBase", "type": "uint256"},
                 {"name": "totalDebtBase", "type": "uint256"},
                 {"name": "availableBorrowsBase", "type": "uint256"},
                 {"name": "currentLiquidationThreshold", "type": "uint256"},
                 {"name": "ltv", "type": "uint256"},
                 {"name": "healthFactor", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "user", "type": "address"}],
     "name": "getUserConfiguration",
     "outputs": [{"components": [{"name": "data", "type": "uint256"}],
                  "name": "", "type": "tuple"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [],
     "name": "getReservesList", "outputs": [{"name": "", "type": "address[]"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "asset", "type": "address"}],
     "name": "getReserveAToken", "outputs": [{"name": "", "type": "address"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [],
     "name": "ADDRESSES_PROVIDER", "outputs": [{"name": "", "type": "address"}],
     "stateMutability": "view", "type": "function"},
]

ADDRESSES_PROVIDER_ABI = [
    {"inputs": [],
     "name": "getPriceOracle", "outputs": [{"name": "", "type": "address"}],
     "stateMutability": "view", "type": "function"},
]

ORACLE_ABI = [
    {"inputs": [{"name": "asset", "type": "address"}],
     "name": "getAssetPrice", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]

ERC20_ABI = [
    {"inputs": [{"name": "account", "type": "address"}],
     "name": "balanceOf", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
     "name": "transfer", "outputs": [{"name": "", "type": "bool"}],
     "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [],
     "name": "symbol", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [],
     "name": "decimals", "outputs": [{"name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
]

CLINIC_STEWARD_ABI = [
    {"inputs": [{"name": "debtAsset", "type": "address"},
                {"name": "collateralAsset", "type": "address"},
                {"name": "users", "type": "address[]"},
                {"name": "useATokens", "type": "bool"}],
     "name": "batchLiquidate", "outputs": [],
     "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [{"name": "asset", "type": "address"},
                {"name": "users", "type": "address[]"},
                {"name": "useATokens", "type": "bool"}],
     "name": "batchRepayBadDebt", "outputs": [],
     "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [],
     "name": "availableBudget", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]
