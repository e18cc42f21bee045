"""Reviewer selection core: config, selection stages and the GitHub adapter."""
