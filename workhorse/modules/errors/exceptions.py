from typing import List, Optional


class WorkhorseError(Exception):
    pass


class ConfigError(WorkhorseError):
    pass


class IdentityNotFoundError(WorkhorseError):
    def __init__(self, searched_paths: List[str], start_dir: Optional[str] = None):
        self.searched_paths = searched_paths
        self.start_dir = start_dir
        super().__init__(
            "app identity not found; searched: " + ", ".join(searched_paths)
        )


class ServerStartError(WorkhorseError):
    pass
