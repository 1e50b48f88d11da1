"""Vector store gateways."""
