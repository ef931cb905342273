import logging

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import LoginSerializer, RegisterSerializer, UserSerializer
from .utils import api_response

logger = logging.getLogger(__name__)


def _token_pair(user):
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


@method_decorator(ratelimit(key='ip', rate='5/h', method='POST'), name='dispatch')
class RegisterView(APIView):
    """View for self-service account registration"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)

        if serializer.is_valid():
            user = serializer.save()
            logger.info(f"Registered new user {user.email}")

            return api_response(
                success=True,
                message='Account created successfully.',
                data={
                    'user': UserSerializer(user).data,
                    'tokens': _token_pair(user),
                },
                status=status.HTTP_201_CREATED
            )

        return api_response(
            success=False,
            message='Registration failed.',
            errors=serializer.errors,
            status=status.HTTP_400_BAD_REQUEST
        )


@method_decorator(ratelimit(key='ip', rate='10/h', method='POST'), name='dispatch')
class LoginView(APIView):
    """View for user login with JWT"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)

        if serializer.is_valid():
            user = serializer.validated_data['user']
            logger.info(f"User {user.email} logged in")

            return api_response(
                success=True,
                message='Login successful.',
                data={
                    'user': UserSerializer(user).data,
                    'tokens': _token_pair(user),
                },
                status=status.HTTP_200_OK
            )

        return api_response(
            success=False,
            message='Login failed.',
            errors=serializer.errors,
            status=status.HTTP_400_BAD_REQUEST
        )


class UserProfileView(APIView):
    """View to get current user profile"""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return api_response(
            success=True,
            message='User profile retrieved successfully.',
            data=UserSerializer(request.user).data,
            status=status.HTTP_200_OK
        )
