"""TUI applications package.

Available applications:
- kubernetes: live pod and deployment dashboard
"""
