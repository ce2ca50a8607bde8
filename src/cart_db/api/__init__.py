from .app import create_app
from .serializers import cart_to_dict, response_to_dict

__all__ = ["create_app", "cart_to_dict", "response_to_dict"]
