"""
Ripple CLI.

Usage:
    ripple parse "thread_url(media_id)"
    ripple inspect myapp.responses:Feed
    ripple encode --serializer signed --key SECRET body.json
"""

__version__ = "0.1.0"
__cli_name__ = "ripple"
