"""Provider lookup by id or marketplace business"""
