from django.contrib.auth import get_user_model, password_validation
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class EmployeeSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", max_length=150)
    middleName = serializers.CharField(source="middle_name", max_length=150, required=False, allow_blank=True, allow_null=True)
    lastName = serializers.CharField(source="last_name", max_length=150)
    isActive = serializers.BooleanField(source="is_active", required=False)
    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)
    roles = serializers.ListField(
        child=serializers.ChoiceField(choices=User.Role.choices),
        min_length=1,
        required=False,
    )
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = ["id", "email", "firstName", "middleName", "lastName", "roles", "isActive", "createdAt", "password"]
        read_only_fields = ["id"]
        extra_kwargs = {"email": {"required": True, "allow_blank": False}}

    def validate_email(self, value):
        normalized_email = value.strip().lower()
        existing = User.objects.filter(email__iexact=normalized_email)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("A user with this email address already exists.")
        return normalized_email

    def validate_middle_name(self, value):
        return value or ""

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def validate(self, attrs):
        if self.instance is None and "roles" not in attrs:
            attrs["roles"] = [User.Role.USER]
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["roles"] = sorted(instance.roles)
        return data

    def _apply_roles(self, validated_data):
        roles = validated_data.pop("roles", None)
        if roles is not None:
            validated_data["role"] = User.Role.ADMIN if User.Role.ADMIN in roles else User.Role.USER
        return validated_data

    def create(self, validated_data):
        validated_data = self._apply_roles(validated_data)
        password = validated_data.pop("password", None)
        user = User(username=validated_data["email"], **validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update(self, instance, validated_data):
        validated_data = self._apply_roles(validated_data)
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if "email" in validated_data:
            instance.username = validated_data["email"]
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class EmployeeSummarySerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    middleName = serializers.CharField(source="middle_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "firstName", "middleName", "lastName", "email"]
        read_only_fields = fields


class EmailOrUsernameTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["roles"] = sorted(user.roles)
        token["first_name"] = user.first_name
        token["last_name"] = user.last_name
        return token

    def validate(self, attrs):
        username = attrs.get("username", "")
        if username and "@" in username:
            try:
                user = User.objects.get(email__iexact=username)
                attrs["username"] = user.get_username()
            except User.DoesNotExist:
                pass
        return super().validate(attrs)
