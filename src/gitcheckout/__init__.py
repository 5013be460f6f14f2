"""
gitcheckout - credential handling for CI repository checkouts

Configures the local git client with credentials for a remote host, propagates
them to submodules and removes every trace again once the build step is done.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
