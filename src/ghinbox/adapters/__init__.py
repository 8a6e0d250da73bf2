"""Adapters binding the core ports to the filesystem and the GitHub API."""
