"""Setup (provisioning) services.

This package contains the orchestration that *provisions* a seller organization on the
commerce platform (API clients, security profiles, integration events, buyers,
suppliers) and the static catalogs it saves.
"""
