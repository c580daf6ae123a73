"""
Member Use Cases
"""

from .issue_member_token_use_case import IssueMemberTokenUseCase, MemberTokenResponse

__all__ = ["IssueMemberTokenUseCase", "MemberTokenResponse"]
