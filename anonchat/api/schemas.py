# anonchat/api/schemas.py

from marshmallow import Schema, fields, pre_load, EXCLUDE
from marshmallow.validate import Length

# --- Схемы полезной нагрузки Socket.IO событий ---


class MessageSchema(Schema):
    """
    Полезная нагрузка события 'message'.
    Текст намеренно не валидируется здесь: пустота и длина
    проверяются в RelayService после проверки пары и капчи.
    """
    class Meta:
        unknown = EXCLUDE

    text = fields.Raw(load_default=None)
    captcha = fields.Str(load_default=None, allow_none=True)


class ReportSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    reason = fields.Str(
        load_default="unspecified",
        validate=Length(max=200, error="Причина жалобы слишком длинная.")
    )

    @pre_load
    def strip_reason(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('reason'), str):
            data = dict(data)
            data['reason'] = data['reason'].strip() or "unspecified"
        return data
