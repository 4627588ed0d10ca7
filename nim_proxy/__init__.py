"""OpenAI-compatible proxy for NVIDIA NIM"""

__version__ = "1.0.0"
