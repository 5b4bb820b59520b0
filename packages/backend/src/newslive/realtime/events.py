"""Event names pushed over the realtime channel."""

NEW_ARTICLE = "new_article"
