from bookrag.boundary.db.CRUD.base_crud import BaseCRUD

__all__ = ["BaseCRUD"]
