"""
Perp Scalper Trading System
A per-asset EMA/RSI signal loop with stop-loss and take-profit overlay
"""

from setuptools import setup, find_packages

setup(
    name="perp-scalper",
    version="0.1.0",
    description="EMA/RSI momentum scalper with simulated and live Hyperliquid settlement",
    author="Christopher Edeson",
    python_requires=">=3.10",
    packages=find_packages(include=["scalper", "scalper.*"]),
    install_requires=[
        line.strip()
        for line in open("requirements.txt")
        if line.strip() and not line.startswith("#")
    ],
    extras_require={
        "dev": [
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
            "isort>=5.12.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "scalper-trade=scalper.cli:main",
        ]
    },
)
