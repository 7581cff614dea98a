"""Slack Web API access: message source, client cache and reminder delivery."""
