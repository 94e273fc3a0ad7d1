"""
Test fixtures for the release hosting client.

Contains sample data for testing:
- release_axolotlsay.json: axolotlsay 1.2.0 with four artifacts, one carrying an unknown field
"""
