"""JOBBOARD identity: version, codename and banner."""

__version__ = "0.1.0"
__codename__ = "JOBBOARD"
__tagline__ = "Local boards, autonomous hands"

BANNER = r"""
     _  ___  ____  ____   ___    _    ____  ____
    | |/ _ \| __ )| __ ) / _ \  / \  |  _ \|  _ \
 _  | | | | |  _ \|  _ \| | | |/ _ \ | |_) | | | |
| |_| | |_| | |_) | |_) | |_| / ___ \|  _ <| |_| |
 \___/ \___/|____/|____/ \___/_/   \_\_| \_\____/
"""
