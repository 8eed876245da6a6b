from .scanner import CodeFile, compute_seed, find_code_files

__all__ = ["CodeFile", "compute_seed", "find_code_files"]
