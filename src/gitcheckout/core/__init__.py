"""Core authentication, git and credential logic for gitcheckout."""
