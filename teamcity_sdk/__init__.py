"""TeamCity SDK tooling for plugin builds.

Keeps a local TeamCity distribution usable as a build dependency:
- Verify the installation and its version
- Fetch a fresh copy through a pluggable retriever when missing
- Start/stop the server (and agent) with output forwarded to logging
- Deploy the freshly built plugin package into the data directory
"""

__all__ = []
