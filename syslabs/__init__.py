"""Small systems tools: calculator, memory-mapped file stream, and CSV line search over sockets and threads."""

__version__ = "0.1.0"
__all__ = ["calculator", "mmap_fstream", "protocol", "socket_client", "socket_server", "shm_search"]