"""
Núcleo do Revcard: modelos, interfaces, exceções e serviços de sessão.
"""
