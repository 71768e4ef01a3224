import pytest

from marketplace.catalog.domain.services import InteractionService
from marketplace.models import ProductComment
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import ProductCommentFactory, ProductFactory, UserFactory


@pytest.mark.django_db
class TestInteractionService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        self.service = InteractionService()
        self.product = ProductFactory()
        self.user = UserFactory()

    def test_toggle_product_like(self):
        liked = self.service.toggle_product_like(self.user, self.product.id)
        unliked = self.service.toggle_product_like(self.user, self.product.id)

        assert liked.value == {"likes": 1, "is_liked": True}
        assert unliked.value == {"likes": 0, "is_liked": False}
        self.product.refresh_from_db()
        assert self.product.like_count == 0

    def test_add_comment_requires_text(self):
        result = self.service.add_comment(self.user, self.product.id, "   ")
        assert result.error == ErrorCodes.INVALID_INPUT

    def test_reply_to_reply_attaches_to_top_level(self):
        top = ProductCommentFactory(product=self.product)
        reply = ProductCommentFactory(product=self.product, parent=top)

        result = self.service.add_comment(self.user, self.product.id, "Agreed", parent_id=reply.id)

        assert result.ok
        assert result.value.parent_id == top.id

    def test_reply_to_comment_on_other_listing(self):
        other = ProductCommentFactory()

        result = self.service.add_comment(self.user, self.product.id, "Hi", parent_id=other.id)

        assert result.error == ErrorCodes.COMMENT_NOT_FOUND

    def test_list_comments_threads_with_is_liked(self):
        top = ProductCommentFactory(product=self.product)
        ProductCommentFactory(product=self.product, parent=top)
        self.service.toggle_comment_like(self.user, top.id)

        comments = self.service.list_comments(self.product.id, user=self.user).value

        assert len(comments) == 1
        assert comments[0].is_liked is True
        assert len(comments[0].replies.all()) == 1
        assert comments[0].replies.all()[0].is_liked is False

    def test_toggle_comment_like_counts(self):
        comment = ProductCommentFactory(product=self.product)

        result = self.service.toggle_comment_like(self.user, comment.id)

        assert result.value["likes"] == 1
        assert ProductComment.objects.get(id=comment.id).like_count == 1

    def test_toggle_like_unknown_comment(self):
        assert self.service.toggle_comment_like(self.user, 999999).error == ErrorCodes.COMMENT_NOT_FOUND
