"""Git stale branch pruning tool.

Features:
- Sync with the remote and drop remote-tracking refs that are gone
- Detect the main branch (init.defaultBranch, main or master)
- Report local branches merged into main whose remote branch is gone
- Optionally delete them with git's safe delete after confirmation
"""

__version__ = "0.1.0"
