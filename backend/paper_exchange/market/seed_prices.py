"""Seed prices and per-symbol parameters for the market simulator."""

# Starting prices for the simulated USD pairs
SEED_PRICES: dict[str, float] = {
    "BTC-USD": 60000.00,
    "ETH-USD": 3000.00,
    "SOL-USD": 100.00,
    "BNB-USD": 500.00,
    "XRP-USD": 0.50,
    "ADA-USD": 0.50,
    "DOT-USD": 10.00,
    "DOGE-USD": 0.10,
    "USDT-USD": 1.00,
    "USDC-USD": 1.00,
}

# Per-symbol GBM parameters
# sigma: annualized volatility (higher = more price movement)
# mu: annualized drift / expected return
SYMBOL_PARAMS: dict[str, dict[str, float]] = {
    "BTC-USD": {"sigma": 0.60, "mu": 0.10},
    "ETH-USD": {"sigma": 0.75, "mu": 0.10},
    "SOL-USD": {"sigma": 1.00, "mu": 0.10},
    "BNB-USD": {"sigma": 0.70, "mu": 0.08},
    "XRP-USD": {"sigma": 0.90, "mu": 0.05},
    "ADA-USD": {"sigma": 0.90, "mu": 0.05},
    "DOT-USD": {"sigma": 0.95, "mu": 0.05},
    "DOGE-USD": {"sigma": 1.20, "mu": 0.05},  # Meme coin, wild swings
    "USDT-USD": {"sigma": 0.01, "mu": 0.0},  # Pegged
    "USDC-USD": {"sigma": 0.01, "mu": 0.0},  # Pegged
}

# Default parameters for symbols not in the list above (dynamically added)
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.80, "mu": 0.05}

# Stablecoins do not follow the rest of the market
STABLECOINS: set[str] = {"USDT-USD", "USDC-USD"}

# Correlation coefficients
CRYPTO_CORR = 0.7  # Altcoins track BTC closely
STABLE_CORR = 0.0  # Pegged assets move independently
