import pytest
from pydantic import ValidationError

from realty.models.blog import Blog, slugify
from realty.models.contact import Contact
from realty.models.review import Review
from realty.models.visit_request import VisitRequest


def test_review_defaults():
    record = Review.model_validate({"_id": "local_1"}).to_record()
    assert record["rating"] == 5
    assert record["comment"] == ""
    assert record["reviewType"] == "general"
    assert record["isApproved"] is False


@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_is_bounded(rating):
    with pytest.raises(ValidationError):
        Review.model_validate({"_id": "local_1", "rating": rating})


def test_blog_derives_excerpt_slug_and_publication():
    record = Blog.model_validate(
        {
            "_id": "local_1",
            "title": "5 Tips for First-Time Buyers!",
            "content": "y" * 300,
        }
    ).to_record()

    assert record["excerpt"] == "y" * 150
    assert record["slug"] == "5-tips-for-first-time-buyers"
    assert record["category"] == "Tips & Advice"
    assert record["publishedAt"] == record["createdAt"]


def test_draft_blog_is_not_published():
    record = Blog.model_validate({"_id": "local_1", "status": "draft"}).to_record()
    assert record["publishedAt"] is None
    assert record["title"] == "Untitled Post"


@pytest.mark.parametrize(
    "title,slug", [("Hello World", "hello-world"), ("!!!", "post"), ("  A  b ", "a-b")]
)
def test_slugify(title, slug):
    assert slugify(title) == slug


def test_contact_defaults():
    record = Contact.model_validate({"_id": "local_1", "name": "Asha"}).to_record()
    assert record["status"] == "new"
    assert record["priority"] == "medium"
    assert record["source"] == "website"
    assert record["isRead"] is False


def test_contact_rejects_unknown_status():
    with pytest.raises(ValidationError):
        Contact.model_validate({"_id": "local_1", "status": "archived"})


def test_visit_request_defaults():
    record = VisitRequest.model_validate(
        {"_id": "local_1", "property": "64b7f0c2a1e4d3b2c1a09f8e"}
    ).to_record()
    assert record["status"] == "pending"
    assert record["notes"] == ""
    assert record["scheduledDate"] is None
    assert record["requestedAt"].endswith("Z")
