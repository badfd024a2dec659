"""Core logic: the repository registry, repositories and their guards."""
