from .service import (
    UserAlreadyExistsError,
    generate_routing_address,
    provision_user,
    render_welcome_email,
)

__all__ = [
    "UserAlreadyExistsError",
    "generate_routing_address",
    "provision_user",
    "render_welcome_email",
]
