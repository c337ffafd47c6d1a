"""
Propener - Open pull requests awaiting your review as browser tabs.

A CLI tool that:
1. Asks the GitHub CLI for open PRs where you are a requested reviewer
2. Opens the ones it has not surfaced before in the browser
3. Remembers what it opened so the next run skips them
4. Sends a desktop notification when something new shows up

Usage:
    propener              # Run one pass
    propener --dry-run    # Run one pass without opening tabs
    propener pause        # Stop opening tabs until resumed
    propener resume       # Resume opening tabs
    propener status       # Show paused/active state
    propener stats        # Summary of notified PRs
"""

__version__ = "0.1.0"
