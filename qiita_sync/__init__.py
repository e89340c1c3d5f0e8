"""
microCMS → Qiita Sync Engine

Publishes microCMS articles to Qiita as Markdown, creating new items
and updating changed ones while skipping everything already in sync.
"""

__version__ = "1.0.0"
