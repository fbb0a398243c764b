"""Transactional orchestration: authorization, lead pipeline and state machines."""
