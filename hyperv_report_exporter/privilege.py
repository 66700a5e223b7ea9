def check_privileges(client) -> bool:
    """True si el principal actual pertenece al rol local Administrators."""
    return client.is_elevated() is True
