"""Network transports: JSON-RPC provider, system contract reader and explorer REST client."""
