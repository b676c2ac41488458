# apps/projects/ports/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional
from apps.projects.domain.entities import ProjectEntity


class ProjectNotFound(ValueError):
    pass


class IProjectRepository(ABC):
    @abstractmethod
    def get_by_id(self, project_id: int) -> Optional[ProjectEntity]:
        pass

    @abstractmethod
    def list_all(self) -> List[ProjectEntity]:
        pass

    @abstractmethod
    def create(self, project: ProjectEntity) -> ProjectEntity:
        """Tworzy nowy projekt i zwraca encję z nadanym ID."""
        pass

    @abstractmethod
    def update(self, project_id: int, fields: dict) -> ProjectEntity:
        """Zapisuje dowolny podzbiór pól encji i zwraca zaktualizowany projekt."""
        pass

    @abstractmethod
    def delete(self, project_id: int) -> List[int]:
        """Usuwa projekt razem z podprojektami (i ich zadaniami). Zwraca usunięte ID."""
        pass
