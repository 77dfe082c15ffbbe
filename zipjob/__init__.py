"""
zipjob: download small batches of files and package them into ZIP archives.
"""

__version__ = "0.1.0"
