"""Account, session, policy and audit services."""
