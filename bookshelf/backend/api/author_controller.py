from flask import Blueprint, request, jsonify
from backend.factories.service_factory import ServiceFactory
from shared.modules.catalog.errors import CatalogError

bp = Blueprint("author_controller", __name__)


def _error_response(e: CatalogError):
    return jsonify(e.to_dict()), e.status_code


@bp.route("/authors", methods=["GET"])
def list_authors():
    """
    List every author (cached listing, refreshed hourly).
    """
    try:
        authors = ServiceFactory.create_author_service().get_authors()
        return jsonify([a.to_doc() for a in authors]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors/search", methods=["GET"])
def search_authors():
    """
    Authors whose first or last name contains ?term=, case-insensitively.
    """
    try:
        views = ServiceFactory.create_derived_view_service()
        authors = views.search_authors_by_name(request.args.get("term", ""))
        return jsonify([a.to_doc() for a in authors]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors/<author_id>", methods=["GET"])
def get_author(author_id):
    try:
        author = ServiceFactory.create_author_service().get_author(author_id)
        return jsonify(author.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors/<author_id>/books", methods=["GET"])
def get_author_books(author_id):
    """
    Books written by an author. Optional ?limit= must be greater than 0.
    """
    try:
        limit = request.args.get("limit", type=int)
        if "limit" in request.args and limit is None:
            limit = 0  # unparseable limit is rejected like a non-positive one
        books = ServiceFactory.create_author_service().get_author_books(author_id, limit=limit)
        return jsonify([b.to_doc() for b in books]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors", methods=["POST"])
def add_author():
    """
    Create an author.

    author_payload = {
        "first_name": "Jane",
        "last_name": "Doe",
        "date_of_birth": "1980-01-01",
        "hometownCity": "Austin",
        "hometownState": "TX"
    }
    """
    try:
        payload = request.get_json(force=True, silent=True)
        author = ServiceFactory.create_author_service().add_author(payload)
        return jsonify(author.to_doc()), 201
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors/<author_id>", methods=["PATCH"])
def edit_author(author_id):
    try:
        payload = request.get_json(force=True, silent=True)
        author = ServiceFactory.create_author_service().edit_author(author_id, payload)
        return jsonify(author.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/authors/<author_id>", methods=["DELETE"])
def remove_author(author_id):
    """
    Delete an author and, with them, every book they wrote.
    Responds with the removed author, its books expanded.
    """
    try:
        author, books = ServiceFactory.create_author_service().remove_author(author_id)
        removed = author.to_doc()
        removed["books"] = [b.to_doc() for b in books]
        return jsonify(removed), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500
