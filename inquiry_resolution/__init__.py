"""Customer identity resolution and inquiry commit engine for the CRM."""
