"""YouTube Video Summarizer.

This package drives a headless browser to find a channel's latest video,
scrape its transcript from the watch page, and summarize it to a target
length with whichever AI provider is configured.
"""
