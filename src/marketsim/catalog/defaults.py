"""
Built-in instrument tables.

Raw dictionaries matching the ``Asset`` union; ``AssetCatalog.default()``
validates them at load time.  Company names are fictional.
"""
from typing import Any, Dict, List

STOCKS: List[Dict[str, Any]] = [
    {"id": "tech_giant", "name": "Tech Giant Inc.", "symbol": "TGNT", "sector": "tech", "volatility": "medium", "base_price": 350.0},
    {"id": "future_systems", "name": "Future Systems", "symbol": "FSYS", "sector": "tech", "volatility": "high", "base_price": 180.0},
    {"id": "global_bank", "name": "Global Bank Holdings", "symbol": "GBNK", "sector": "finance", "volatility": "low", "base_price": 120.0},
    {"id": "energy_corp", "name": "Energy Corp International", "symbol": "ECOR", "sector": "energy", "volatility": "medium", "base_price": 75.0},
    {"id": "green_energy", "name": "Green Energy Solutions", "symbol": "GRNS", "sector": "energy", "volatility": "high", "base_price": 45.0},
    {"id": "consumer_brands", "name": "Consumer Brands Co", "symbol": "CBCO", "sector": "consumer", "volatility": "low", "base_price": 90.0},
    {"id": "luxe_retail", "name": "Luxe Retail Group", "symbol": "LUXE", "sector": "consumer", "volatility": "medium", "base_price": 65.0},
    {"id": "med_innovations", "name": "Medical Innovations", "symbol": "MEDI", "sector": "healthcare", "volatility": "high", "base_price": 110.0},
    {"id": "property_trust", "name": "Property Trust REIT", "symbol": "REIT", "sector": "real_estate", "volatility": "low", "base_price": 50.0},
    {"id": "startup_fund", "name": "Startup Fund ETF", "symbol": "STUP", "sector": "tech", "volatility": "very_high", "base_price": 25.0},
    {"id": "apricot_tech", "name": "Apricot Technologies", "symbol": "APCT", "sector": "tech", "volatility": "medium", "base_price": 175.42},
    {"id": "macrosoft", "name": "Macrosoft Inc.", "symbol": "MCSF", "sector": "tech", "volatility": "low", "base_price": 320.65},
    {"id": "nvidia_studios", "name": "Nvidia Studios", "symbol": "NVDS", "sector": "tech", "volatility": "high", "base_price": 450.75},
    {"id": "oracle_systems", "name": "Oracle Systems Corp", "symbol": "ORSC", "sector": "tech", "volatility": "very_low", "base_price": 109.63},
    # Specialty names for high-risk investors.
    {"id": "cosmic_crypto", "name": "Cosmic Cryptocurrency Exchange", "symbol": "CCEX", "sector": "finance", "volatility": "extreme", "base_price": 85.37},
    {"id": "quantum_computing", "name": "Quantum Computing Solutions", "symbol": "QCSL", "sector": "tech", "volatility": "extreme", "base_price": 124.83},
    {"id": "asteroid_mining", "name": "Asteroid Mining Ventures", "symbol": "ASTM", "sector": "materials", "volatility": "extreme", "base_price": 32.75},
]

CRYPTO: List[Dict[str, Any]] = [
    {"id": "btc", "name": "Bitcoin", "symbol": "BTC", "coin_type": "bitcoin", "volatility": "very_high", "base_price": 45000.0},
    {"id": "eth", "name": "Ethereum", "symbol": "ETH", "coin_type": "ethereum", "volatility": "high", "base_price": 3000.0},
    {"id": "usdc", "name": "USD Coin", "symbol": "USDC", "coin_type": "stablecoin", "volatility": "very_low", "base_price": 1.0},
    {"id": "sol", "name": "Solana", "symbol": "SOL", "coin_type": "altcoin", "volatility": "very_high", "base_price": 100.0},
    {"id": "meme", "name": "Meme Coin", "symbol": "MEME", "coin_type": "meme", "volatility": "extreme", "base_price": 0.01},
]

# Bonds are quoted per 1,000 of face value.
BONDS: List[Dict[str, Any]] = [
    {"id": "govt_bond", "name": "Government Bond 5-Year", "bond_type": "treasury", "term_years": 5, "yield_rate": 0.03, "volatility": "very_low", "base_price": 1000.0},
    {"id": "corp_bond_a", "name": "AAA Corporate Bond", "bond_type": "corporate", "term_years": 3, "yield_rate": 0.045, "volatility": "very_low", "base_price": 1000.0},
    {"id": "corp_bond_b", "name": "BBB Corporate Bond", "bond_type": "corporate", "term_years": 5, "yield_rate": 0.065, "volatility": "low", "base_price": 1000.0},
    {"id": "muni_bond", "name": "Municipal Bond Fund", "bond_type": "municipal", "term_years": 7, "yield_rate": 0.038, "volatility": "very_low", "base_price": 1000.0},
    {"id": "high_yield", "name": "High-Yield Corporate Bond", "bond_type": "junk", "term_years": 2, "yield_rate": 0.085, "volatility": "medium", "base_price": 1000.0},
]

PROPERTIES: List[Dict[str, Any]] = [
    {"id": "apartment_basic", "name": "City Apartment", "region": "urban", "volatility": "low", "base_price": 250000.0},
    {"id": "townhouse", "name": "Suburban Townhouse", "region": "suburban", "volatility": "low", "base_price": 450000.0},
    {"id": "single_family", "name": "Single Family Home", "region": "suburban", "volatility": "very_low", "base_price": 650000.0},
    {"id": "penthouse", "name": "Downtown Penthouse", "region": "urban_premium", "volatility": "medium", "base_price": 3500000.0},
    {"id": "beach_house", "name": "Oceanfront Beach House", "region": "coastal", "volatility": "medium", "base_price": 5000000.0},
]

OTHER: List[Dict[str, Any]] = [
    {"id": "fine_art", "name": "Fine Art Fund", "category": "art", "volatility": "medium", "base_price": 5000.0},
    {"id": "gold_bullion", "name": "Gold Bullion", "category": "commodity", "volatility": "low", "base_price": 1900.0},
    {"id": "vintage_wine", "name": "Vintage Wine Portfolio", "category": "collectible", "volatility": "low", "base_price": 2500.0},
    {"id": "classic_cars", "name": "Classic Car Collection", "category": "collectible", "volatility": "high", "base_price": 80000.0},
]

DEFAULT_ASSETS: Dict[str, List[Dict[str, Any]]] = {
    "stock": STOCKS,
    "crypto": CRYPTO,
    "bond": BONDS,
    "property": PROPERTIES,
    "other": OTHER,
}
