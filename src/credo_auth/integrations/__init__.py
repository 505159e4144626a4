"""Web framework integrations for the request authenticator."""
