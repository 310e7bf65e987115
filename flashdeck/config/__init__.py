"""Configuration module for FlashDeck."""

from .settings import Config

__all__ = ['Config']
