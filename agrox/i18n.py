"""
Static pt/en message tables.

The language preference lives in the ``fleet_language`` cookie; anything that
is not a supported language falls back to Portuguese.
"""
from typing import Optional

from fastapi import Request

from .config import settings


LANGUAGE_COOKIE = "fleet_language"
SUPPORTED_LANGUAGES = ("pt", "en")
FALLBACK_LANGUAGE = "pt"


TRANSLATIONS = {
    "pt": {
        # Language selection
        "selectLanguage": "Selecione o idioma",
        "continue": "Continuar",
        # Auth
        "login": "Entrar",
        "signup": "Criar conta",
        "email": "E-mail",
        "password": "Senha",
        "firstName": "Nome",
        "lastName": "Sobrenome",
        "confirmPassword": "Confirmar senha",
        "forgotPassword": "Esqueceu a senha?",
        "dontHaveAccount": "Não tem conta?",
        "alreadyHaveAccount": "Já tem conta?",
        "signInHere": "Entre aqui",
        "signUpHere": "Cadastre-se aqui",
        "passwordsDontMatch": "As senhas não coincidem",
        # Dashboard
        "welcomeBack": "Bem-vindo",
        "dashboard": "Painel",
        "activityRecord": "Registro de Atividade",
        "maintenance": "Manutenção",
        "damages": "Danos",
        "fuel": "Combustível",
        "orders": "Pedidos",
        "support": "Suporte TI",
        "myDocuments": "Meus Documentos",
        "approvals": "Aprovações",
        "activityValidation": "Validação de Atividades",
        "comingSoon": "Módulo em breve...",
        # Activity registration
        "startActivity": "Iniciar Atividade",
        "endActivity": "Finalizar Atividade",
        "selectMachine": "Selecionar Máquina",
        "odometer": "Hodômetro",
        "takeSelfie": "Tirar Selfie",
        "location": "Localização",
        "notes": "Observações",
        "register": "Registrar",
        "finish": "Finalizar",
        # Screens
        "client": "Cliente",
        "service": "Serviço",
        "odometerPhoto": "Foto do hodômetro",
        "rating": "Avaliação (1-5)",
        "area": "Área",
        "areaNotes": "Observações da área",
        "save": "Salvar",
        "saved": "Salvo",
        "remove": "Remover",
        "upload": "Enviar",
        "submitForApproval": "Enviar para aprovação",
        "status": "Estado",
        "documentType": "Tipo de documento",
        "address": "Morada",
        "city": "Cidade",
        "postalCode": "Código postal",
        "country": "País",
        "operator": "Operador",
        "machine": "Máquina",
        "startTime": "Início",
        "name": "Nome",
        "role": "Papel",
        "submittedAt": "Enviado em",
        "photos": "Fotos",
        "approve": "Aprovar",
        "reject": "Rejeitar",
        "open": "Abrir",
        "filter": "Filtrar",
        "machines": "Máquinas",
        "masterData": "Dados mestre",
        "users": "Utilizadores",
        "clients": "Clientes",
        "locations": "Locais",
        "services": "Serviços",
        "rolesAudit": "Auditoria de papéis",
        "superAdmin": "Super admin",
        "grantedBy": "Atribuído por",
        "fileName": "Arquivo",
        "size": "Tamanho",
        "date": "Data",
        "internalId": "ID interno",
        "brand": "Marca",
        "model": "Modelo",
        "plate": "Matrícula",
        "serialNumber": "Número de série",
        # Status
        "pendingValidation": "Aguardando validação",
        "validated": "Validado",
        "rejected": "Rejeitado",
        # Common
        "logout": "Sair",
        "loading": "Carregando...",
        "error": "Erro",
        "success": "Sucesso",
        "cancel": "Cancelar",
        # Errors
        "genericError": "Ocorreu um erro. Tente novamente.",
        "notAuthorized": "Você não tem permissão para esta ação.",
        "invalidEmail": "E-mail inválido.",
        "cannotChangeSelf": "Você não pode alterar o seu próprio papel.",
        "machineRequired": "Selecione uma máquina.",
        "odometerRequired": "Informe o hodômetro.",
        "locationRequired": "Capture a localização antes de continuar.",
        "photoRequired": "Tire as fotos obrigatórias antes de continuar.",
        "ratingRequired": "Escolha uma avaliação de 1 a 5.",
        "activityAlreadyOpen": "Já existe uma atividade em andamento.",
        "noOpenActivity": "Nenhuma atividade em andamento.",
        "imageTooLarge": "Imagem muito grande (máx. 5MB).",
        "invalidImageType": "Arquivo inválido: envie uma imagem.",
        "emptyImage": "Imagem vazia.",
        "fileTooLarge": "Arquivo muito grande (máx. 10MB).",
        "fileTypeNotAllowed": "Tipo de arquivo não permitido (PDF ou imagem).",
        "rejectionNotesRequired": "Informe o motivo da rejeição.",
        "nameRequired": "Informe o nome.",
        "notFound": "Registro não encontrado.",
    },
    "en": {
        # Language selection
        "selectLanguage": "Select Language",
        "continue": "Continue",
        # Auth
        "login": "Login",
        "signup": "Sign Up",
        "email": "Email",
        "password": "Password",
        "firstName": "First Name",
        "lastName": "Last Name",
        "confirmPassword": "Confirm Password",
        "forgotPassword": "Forgot password?",
        "dontHaveAccount": "Don't have an account?",
        "alreadyHaveAccount": "Already have an account?",
        "signInHere": "Sign in here",
        "signUpHere": "Sign up here",
        "passwordsDontMatch": "Passwords do not match",
        # Dashboard
        "welcomeBack": "Welcome back",
        "dashboard": "Dashboard",
        "activityRecord": "Activity Record",
        "maintenance": "Maintenance",
        "damages": "Damages",
        "fuel": "Fuel",
        "orders": "Orders",
        "support": "IT Support",
        "myDocuments": "My Documents",
        "approvals": "Approvals",
        "activityValidation": "Activity Validation",
        "comingSoon": "Module coming soon...",
        # Activity registration
        "startActivity": "Start Activity",
        "endActivity": "End Activity",
        "selectMachine": "Select Machine",
        "odometer": "Odometer",
        "takeSelfie": "Take Selfie",
        "location": "Location",
        "notes": "Notes",
        "register": "Register",
        "finish": "Finish",
        # Screens
        "client": "Client",
        "service": "Service",
        "odometerPhoto": "Odometer photo",
        "rating": "Rating (1-5)",
        "area": "Area",
        "areaNotes": "Area notes",
        "save": "Save",
        "saved": "Saved",
        "remove": "Remove",
        "upload": "Upload",
        "submitForApproval": "Submit for approval",
        "status": "Status",
        "documentType": "Document type",
        "address": "Address",
        "city": "City",
        "postalCode": "Postal code",
        "country": "Country",
        "operator": "Operator",
        "machine": "Machine",
        "startTime": "Start",
        "name": "Name",
        "role": "Role",
        "submittedAt": "Submitted",
        "photos": "Photos",
        "approve": "Approve",
        "reject": "Reject",
        "open": "Open",
        "filter": "Filter",
        "machines": "Machines",
        "masterData": "Master data",
        "users": "Users",
        "clients": "Clients",
        "locations": "Locations",
        "services": "Services",
        "rolesAudit": "Roles audit",
        "superAdmin": "Super admin",
        "grantedBy": "Granted by",
        "fileName": "File",
        "size": "Size",
        "date": "Date",
        "internalId": "Internal ID",
        "brand": "Brand",
        "model": "Model",
        "plate": "Plate",
        "serialNumber": "Serial number",
        # Status
        "pendingValidation": "Pending validation",
        "validated": "Validated",
        "rejected": "Rejected",
        # Common
        "logout": "Logout",
        "loading": "Loading...",
        "error": "Error",
        "success": "Success",
        "cancel": "Cancel",
        # Errors
        "genericError": "Something went wrong. Please try again.",
        "notAuthorized": "You are not allowed to perform this action.",
        "invalidEmail": "Invalid email.",
        "cannotChangeSelf": "You cannot change your own role.",
        "machineRequired": "Select a machine.",
        "odometerRequired": "Enter the odometer reading.",
        "locationRequired": "Capture your location before continuing.",
        "photoRequired": "Take the required photos before continuing.",
        "ratingRequired": "Choose a rating from 1 to 5.",
        "activityAlreadyOpen": "There is already an activity in progress.",
        "noOpenActivity": "No activity in progress.",
        "imageTooLarge": "Image too large (max 5MB).",
        "invalidImageType": "Invalid file: please send an image.",
        "emptyImage": "Empty image.",
        "fileTooLarge": "File too large (max 10MB).",
        "fileTypeNotAllowed": "File type not allowed (PDF or image).",
        "rejectionNotesRequired": "Please give a reason for the rejection.",
        "nameRequired": "Enter a name.",
        "notFound": "Record not found.",
    },
}


def normalize_language(value: Optional[str]) -> str:
    """Map a stored/requested language tag onto a supported one ("pt-PT" -> "pt")."""
    v = (value or "").strip().lower()
    if v in ("pt", "pt-pt", "pt-br", "pt_pt"):
        return "pt"
    if v.startswith("en"):
        return "en"
    return FALLBACK_LANGUAGE


def translate(key: str, lang: Optional[str] = None) -> str:
    table = TRANSLATIONS.get(normalize_language(lang or settings.default_language), {})
    if key in table:
        return table[key]
    return TRANSLATIONS[FALLBACK_LANGUAGE].get(key, key)


def get_request_language(request: Request) -> str:
    return normalize_language(request.cookies.get(LANGUAGE_COOKIE) or settings.default_language)
