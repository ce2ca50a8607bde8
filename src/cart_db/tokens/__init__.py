from .codec import RecoveryTokenCodec, generate_token, verify_token

__all__ = ["RecoveryTokenCodec", "generate_token", "verify_token"]
