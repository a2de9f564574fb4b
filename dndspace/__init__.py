"""
DnD Space - 캠페인 캐릭터 소셜 네트워크 백엔드
"""

__version__ = "1.0.0"
