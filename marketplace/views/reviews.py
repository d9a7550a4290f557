from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..models import ReviewHelpfulVote
from ..serializers import ProductReviewSerializer, ReviewCreateSerializer, ReviewUpdateSerializer
from ..services import ReviewService


def _required_product_id(request):
    product_id = request.query_params.get("product_id")
    if not product_id:
        raise ValidationError({"product_id": "This query parameter is required."})
    return product_id


class ProductReviewViewSet(viewsets.GenericViewSet):
    """
    Approved reviews of a product (``?product_id=&sort=``) and the
    customer's own review operations.
    """
    serializer_class = ProductReviewSerializer

    def get_permissions(self):
        if self.action == "list":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_queryset(self):
        return ReviewService.product_reviews(
            _required_product_id(self.request),
            self.request.query_params.get("sort"),
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        if user.is_authenticated:
            context["voted_review_ids"] = set(
                ReviewHelpfulVote.objects.filter(user=user).values_list("review_id", flat=True)
            )
        return context

    def list(self, request):
        queryset = self.get_queryset()
        stats = ReviewService.product_rating_stats(_required_product_id(request))
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(self.get_serializer(page, many=True).data)
        response.data["stats"] = stats
        return response

    def create(self, request):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = ReviewService.create_review(request.user, **serializer.validated_data)
        return Response(self.get_serializer(review).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = ReviewUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        review = ReviewService.update_review(pk, request.user, **serializer.validated_data)
        return Response(self.get_serializer(review).data)

    def destroy(self, request, pk=None):
        return Response(ReviewService.delete_review(pk, request.user))

    @action(detail=False, methods=["get"])
    def eligibility(self, request):
        return Response(ReviewService.check_eligibility(request.user, _required_product_id(request)))

    @action(detail=True, methods=["post"])
    def helpful(self, request, pk=None):
        return Response(ReviewService.toggle_helpful(pk, request.user))
