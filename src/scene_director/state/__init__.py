"""Production state: snapshot types and the store that owns them."""
