"""
zmachine-api

REST API for playing Z-machine interactive fiction. Game sessions are backed
by interchangeable interpreter adapters (Jericho in-process, a dfrotz
subprocess, or a scripted stand-in), and a small CLI client plays over HTTP.
"""

__version__ = "0.1.0"
