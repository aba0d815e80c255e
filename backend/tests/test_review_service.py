"""
Scholar Stream Backend: Review Service Unit Tests
==================================================

What we test:
    ✅ Rating coercion from numbers and numeric strings
    ✅ Applicant identity fallback (applicant* before user*)
    ✅ Submit inserts a first review, updates an existing one
    ✅ Application is flagged reviewed in both cases
    ✅ Missing application / scholarship → NotFoundError
"""

from datetime import datetime

import pytest
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.results import InsertOneResult, UpdateResult

from conftest import make_cursor
from scholarstream.exceptions import NotFoundError, ValidationError
from scholarstream.services.review_service import (
    ANONYMOUS_REVIEWER,
    ReviewService,
    applicant_identity,
    coerce_rating,
)


class TestCoerceRating:

    @pytest.mark.parametrize("raw,expected", [(4, 4), (4.7, 4), ("5", 5), ("3 stars", 3), (" 2", 2)])
    def test_accepts_numbers(self, raw, expected):
        assert coerce_rating(raw) == expected

    @pytest.mark.parametrize("raw", ["five", "", True, float("inf"), float("-inf"), float("nan")])
    def test_rejects_non_numeric(self, raw):
        with pytest.raises(ValidationError, match="Rating must be an integer"):
            coerce_rating(raw)


class TestApplicantIdentity:

    def test_applicant_fields_win(self):
        application = {
            "applicantEmail": "a@example.com",
            "userEmail": "u@example.com",
            "userName": "User Name",
        }
        assert applicant_identity(application) == ("a@example.com", "User Name", None)

    def test_user_fields_fallback(self):
        application = {"userEmail": "u@example.com", "userName": "U", "userPhoto": "u.png"}
        assert applicant_identity(application) == ("u@example.com", "U", "u.png")


class TestSubmitForApplication:

    def setup_method(self):
        self.service = ReviewService()
        self.application_id = ObjectId()
        self.scholarship_id = ObjectId()

    def _arrange(self, mock_store, existing_review=None):
        mock_store.applications.find_one.return_value = {
            "_id": self.application_id,
            "scholarshipId": str(self.scholarship_id),
            "userEmail": "s@example.com",
            "userName": "",
        }
        mock_store.scholarships.find_one.return_value = {
            "_id": self.scholarship_id,
            "scholarshipName": "STEM Fund",
            "universityName": "State U",
        }
        mock_store.reviews.find_one.return_value = existing_review

    @pytest.mark.asyncio
    async def test_first_review_is_inserted(self, mock_store):
        self._arrange(mock_store)
        review_id = ObjectId()
        mock_store.reviews.insert_one.return_value = InsertOneResult(review_id, True)

        result = await self.service.submit_for_application(
            mock_store, str(self.application_id), "4", "  Great program  "
        )

        assert result.success is True
        assert result.result.insertedId == str(review_id)
        review = mock_store.reviews.insert_one.await_args.args[0]
        assert review["ratingPoint"] == 4
        assert review["reviewComment"] == "Great program"
        assert review["userName"] == ANONYMOUS_REVIEWER
        assert review["userPhoto"] is None
        assert review["scholarshipName"] == "STEM Fund"
        assert isinstance(review["reviewDate"], datetime)
        mock_store.reviews.find_one.assert_awaited_once_with(
            {"scholarshipId": str(self.scholarship_id), "userEmail": "s@example.com"}
        )
        mock_store.applications.update_one.assert_awaited_once_with(
            {"_id": self.application_id}, {"$set": {"reviewed": True}}
        )

    @pytest.mark.asyncio
    async def test_existing_review_is_updated_in_place(self, mock_store):
        existing_id = ObjectId()
        self._arrange(mock_store, existing_review={"_id": existing_id})
        mock_store.reviews.update_one.return_value = UpdateResult({"n": 1, "nModified": 1}, True)

        result = await self.service.submit_for_application(mock_store, str(self.application_id), 5, "Better")

        assert result.result.modifiedCount == 1
        mock_store.reviews.insert_one.assert_not_awaited()
        query, update = mock_store.reviews.update_one.await_args.args
        assert query == {"_id": existing_id}
        assert update["$set"]["ratingPoint"] == 5
        mock_store.applications.update_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_application(self, mock_store):
        with pytest.raises(NotFoundError):
            await self.service.submit_for_application(mock_store, str(ObjectId()), 4, "x")
        mock_store.reviews.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_scholarship(self, mock_store):
        self._arrange(mock_store)
        mock_store.scholarships.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.submit_for_application(mock_store, str(self.application_id), 4, "x")
        mock_store.applications.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_rating_rejected_before_store_calls(self, mock_store):
        with pytest.raises(ValidationError):
            await self.service.submit_for_application(mock_store, str(self.application_id), "great", "x")
        mock_store.applications.find_one.assert_not_awaited()


class TestListingsAndEdits:

    def setup_method(self):
        self.service = ReviewService()

    @pytest.mark.asyncio
    async def test_by_scholarship_newest_first(self, mock_store):
        cursor = make_cursor([{"_id": ObjectId(), "scholarshipId": "s1"}])
        mock_store.reviews.find.return_value = cursor

        reviews = await self.service.list_by_scholarship(mock_store, "s1")

        assert len(reviews) == 1
        mock_store.reviews.find.assert_called_once_with({"scholarshipId": "s1"})
        cursor.sort.assert_called_once_with("reviewDate", DESCENDING)

    @pytest.mark.asyncio
    async def test_by_user_newest_first(self, mock_store):
        oid = ObjectId()
        cursor = make_cursor([{"_id": oid, "userEmail": "s@example.com"}])
        mock_store.reviews.find.return_value = cursor

        reviews = await self.service.list_by_user(mock_store, "s@example.com")

        assert reviews == [{"_id": str(oid), "userEmail": "s@example.com"}]
        mock_store.reviews.find.assert_called_once_with({"userEmail": "s@example.com"})
        cursor.sort.assert_called_once_with("reviewDate", DESCENDING)

    @pytest.mark.asyncio
    async def test_update_review_sets_date(self, mock_store):
        oid = ObjectId()
        mock_store.reviews.update_one.return_value = UpdateResult({"n": 1, "nModified": 1}, True)

        await self.service.update_review(mock_store, str(oid), "Edited", 3)

        query, update = mock_store.reviews.update_one.await_args.args
        assert query == {"_id": oid}
        assert update["$set"]["reviewComment"] == "Edited"
        assert update["$set"]["ratingPoint"] == 3
        assert isinstance(update["$set"]["reviewDate"], datetime)
