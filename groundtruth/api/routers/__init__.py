"""API routers."""

from groundtruth.api.routers import authenticate, classes, classifiers, content, imports, tenants, texts

__all__ = ["authenticate", "classes", "classifiers", "content", "imports", "tenants", "texts"]
