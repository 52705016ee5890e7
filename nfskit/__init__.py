"""XDR encoding, file metadata and an inode registry for NFS servers."""

__version__ = "0.1.0"
__all__ = ["xdr", "utils", "inodes"]