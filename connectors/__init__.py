"""
connectors — clients for external services.

Currently one provider:
  • AutoSend — transactional email (``connectors.autosend``)
"""
