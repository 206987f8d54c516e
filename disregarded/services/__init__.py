from disregarded.services.essays import EssayService

__all__ = ["EssayService"]
