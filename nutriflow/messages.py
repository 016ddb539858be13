# -*- coding: utf-8 -*-
"""User-facing notification texts (toasts), keyed by locale."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .config import settings

_MESSAGES: Dict[str, Dict[str, str]] = {
    "pt-BR": {
        "generic_error": "Ocorreu um erro inesperado",
        "not_authenticated": "Sessão expirada. Faça login novamente",
        "not_found": "Registro não encontrado",
        "required_fields": "Preencha todos os campos obrigatórios",
        "write_failed": "Erro ao salvar alterações",
        "image_too_large": "Imagem muito grande. Máximo 5MB.",
        "upload_failed": "Erro ao fazer upload da imagem",
        "patient_created": "Paciente cadastrado com sucesso!",
        "patient_updated": "Paciente atualizado com sucesso!",
        "patient_deleted": "Paciente excluído com sucesso!",
        "patient_load_failed": "Erro ao carregar pacientes",
        "appointment_created": "Consulta agendada com sucesso!",
        "appointment_updated": "Consulta atualizada com sucesso!",
        "appointment_deleted": "Consulta cancelada com sucesso!",
        "appointment_create_failed": "Erro ao agendar consulta",
        "appointment_update_failed": "Erro ao atualizar consulta",
        "appointment_delete_failed": "Erro ao cancelar consulta",
        "plan_title_required": "Preencha pelo menos o título do plano",
        "plan_created": "Plano alimentar criado com sucesso!",
        "plan_updated": "Plano atualizado com sucesso!",
        "plan_deleted": "Plano excluído com sucesso!",
        "plan_copied": "Plano copiado com sucesso!",
        "plan_create_failed": "Erro ao criar plano alimentar",
        "plan_update_failed": "Erro ao atualizar plano",
        "plan_delete_failed": "Erro ao excluir plano",
        "plan_copy_failed": "Erro ao copiar plano",
        "meal_fields_required": "Preencha nome e horário da refeição",
        "food_fields_required": "Preencha alimento e quantidade",
        "record_created": "Registro criado com sucesso!",
        "record_updated": "Registro atualizado com sucesso!",
        "record_deleted": "Registro excluído com sucesso!",
        "record_create_failed": "Erro ao criar registro",
        "record_update_failed": "Erro ao atualizar registro",
        "record_delete_failed": "Erro ao excluir registro",
        "chat_create_failed": "Erro ao criar conversa",
        "message_send_failed": "Erro ao enviar mensagem",
        "profile_updated": "Perfil atualizado com sucesso!",
        "profile_update_failed": "Erro ao atualizar perfil",
        "avatar_updated": "Foto de perfil atualizada!",
        "notifications_updated": "Configuração de notificação atualizada!",
        "privacy_updated": "Configuração de privacidade atualizada!",
        "settings_update_failed": "Erro ao atualizar configurações",
        "password_mismatch": "As senhas não coincidem",
        "password_too_short": "A nova senha deve ter pelo menos 6 caracteres",
        "password_updated": "Senha atualizada com sucesso!",
    },
    "en": {
        "generic_error": "Something went wrong",
        "not_authenticated": "Session expired. Please sign in again",
        "not_found": "Record not found",
        "required_fields": "Fill in all required fields",
        "write_failed": "Could not save changes",
        "image_too_large": "Image too large. Maximum 5MB.",
        "upload_failed": "Could not upload the image",
        "patient_created": "Patient created",
        "patient_updated": "Patient updated",
        "patient_deleted": "Patient deleted",
        "patient_load_failed": "Could not load patients",
        "appointment_created": "Appointment scheduled",
        "appointment_updated": "Appointment updated",
        "appointment_deleted": "Appointment canceled",
        "appointment_create_failed": "Could not schedule appointment",
        "appointment_update_failed": "Could not update appointment",
        "appointment_delete_failed": "Could not cancel appointment",
        "plan_title_required": "Fill in at least the plan title",
        "plan_created": "Diet plan created",
        "plan_updated": "Diet plan updated",
        "plan_deleted": "Diet plan deleted",
        "plan_copied": "Diet plan copied",
        "plan_create_failed": "Could not create diet plan",
        "plan_update_failed": "Could not update diet plan",
        "plan_delete_failed": "Could not delete diet plan",
        "plan_copy_failed": "Could not copy diet plan",
        "meal_fields_required": "Fill in meal name and time",
        "food_fields_required": "Fill in food and quantity",
        "record_created": "Record created",
        "record_updated": "Record updated",
        "record_deleted": "Record deleted",
        "record_create_failed": "Could not create record",
        "record_update_failed": "Could not update record",
        "record_delete_failed": "Could not delete record",
        "chat_create_failed": "Could not create conversation",
        "message_send_failed": "Could not send message",
        "profile_updated": "Profile updated",
        "profile_update_failed": "Could not update profile",
        "avatar_updated": "Profile photo updated",
        "notifications_updated": "Notification settings updated",
        "privacy_updated": "Privacy settings updated",
        "settings_update_failed": "Could not update settings",
        "password_mismatch": "Passwords do not match",
        "password_too_short": "The new password must have at least 6 characters",
        "password_updated": "Password updated",
    },
}


def message(key: str, locale: Optional[str] = None) -> str:
    table = _MESSAGES.get(locale or settings.locale) or _MESSAGES["en"]
    return table.get(key) or _MESSAGES["en"].get(key) or key


def notification(key: str, *, level: str = "success", locale: Optional[str] = None) -> Dict[str, Any]:
    return {"level": level, "message": message(key, locale)}
