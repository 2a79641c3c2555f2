"""Customer debt ledger and cash book for small shops."""

__version__ = "0.1.0"


def __getattr__(name):
    if name == "main":
        from shopledger.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
