"""
nyancat - stream the poptart cat to terminals, telnet clients and browsers.
"""

__version__ = "1.0.0"
