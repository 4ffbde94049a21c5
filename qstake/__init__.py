"""
qstake Package

Core imports are lazily loaded so that importing a submodule does not pull in
the whole ledger. For direct module access, import from submodules:

    from qstake.staking import StakeLedger
    from qstake.tokens import ERC20Token
    from qstake.fixed_point import daily_rate_from_apy
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    if name == 'StakeLedger':
        from .staking import StakeLedger
        return StakeLedger
    elif name == 'ERC20Token':
        from .tokens import ERC20Token
        return ERC20Token
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'qstake' has no attribute {name!r}")

__all__ = ['StakeLedger', 'ERC20Token', 'load_config']
