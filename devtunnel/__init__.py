"""Start a remote EC2 development server and open a SOCKS5 SSH tunnel to it."""

__version__ = "0.1.0"
