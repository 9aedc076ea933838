from flask import Blueprint, request, jsonify
from backend.factories.service_factory import ServiceFactory
from shared.modules.catalog.errors import CatalogError

bp = Blueprint("book_controller", __name__)


def _error_response(e: CatalogError):
    return jsonify(e.to_dict()), e.status_code


@bp.route("/books", methods=["GET"])
def list_books():
    try:
        books = ServiceFactory.create_book_service().get_books()
        return jsonify([b.to_doc() for b in books]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/genre/<genre>", methods=["GET"])
def books_by_genre(genre):
    try:
        books = ServiceFactory.create_derived_view_service().books_by_genre(genre)
        return jsonify([b.to_doc() for b in books]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/price", methods=["GET"])
def books_by_price_range():
    """
    Books priced within ?min=&max=, both ends inclusive.
    """
    try:
        min_price = request.args.get("min", type=float)
        max_price = request.args.get("max", type=float)
        books = ServiceFactory.create_derived_view_service().books_by_price_range(min_price, max_price)
        return jsonify([b.to_doc() for b in books]), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/<book_id>", methods=["GET"])
def get_book(book_id):
    try:
        book = ServiceFactory.create_book_service().get_book(book_id)
        return jsonify(book.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/<book_id>/author", methods=["GET"])
def get_book_author(book_id):
    try:
        author = ServiceFactory.create_book_service().get_book_author(book_id)
        return jsonify(author.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books", methods=["POST"])
def add_book():
    """
    Create a book and count it against its author.

    book_payload = {
        "title": "Title X",
        "genres": ["Fiction"],
        "publicationDate": "01/01/2020",
        "publisher": "Acme",
        "summary": "A story.",
        "isbn": "978-3-16-148410-0",
        "language": "English",
        "pageCount": 320,
        "price": 19.99,
        "format": ["Hardcover"],
        "authorId": "<author uuid>"
    }
    """
    try:
        payload = request.get_json(force=True, silent=True)
        book = ServiceFactory.create_book_service().add_book(payload)
        return jsonify(book.to_doc()), 201
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/<book_id>", methods=["PATCH"])
def edit_book(book_id):
    try:
        payload = request.get_json(force=True, silent=True)
        book = ServiceFactory.create_book_service().edit_book(book_id, payload)
        return jsonify(book.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@bp.route("/books/<book_id>", methods=["DELETE"])
def remove_book(book_id):
    try:
        book = ServiceFactory.create_book_service().remove_book(book_id)
        return jsonify(book.to_doc()), 200
    except CatalogError as e:
        return _error_response(e)
    except Exception as e:
        return jsonify({"error": str(e)}), 500
