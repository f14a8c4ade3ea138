"""Localization and currency formatting for RoofReport.

Static lookup tables only: text keys map to per-language strings, currency
codes map to display symbols. No exchange-rate conversion is performed.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

import structlog

from config.settings import settings

logger = structlog.get_logger()

DEFAULT_LANGUAGE = "english"
DEFAULT_CURRENCY = "USD"

SUPPORTED_LANGUAGES = (
    "english",
    "spanish",
    "french",
    "german",
    "italian",
    "portuguese",
    "chinese",
    "japanese",
)

LANGUAGE_ALIASES: Dict[str, str] = {
    "en": "english",
    "es": "spanish",
    "fr": "french",
    "de": "german",
    "it": "italian",
    "pt": "portuguese",
    "zh": "chinese",
    "ja": "japanese",
}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "CA$",
    "AUD": "A$",
    "JPY": "¥",
    "CHF": "CHF ",
}

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY"}


# =============================================================================
# TEXT TABLE
# =============================================================================

ENGLISH: Dict[str, str] = {
    # Report titles
    "title_homeowner": "YOUR ROOF ASSESSMENT REPORT",
    "title_contractor": "CONTRACTOR PROJECT REPORT",
    "title_inspector": "PROFESSIONAL INSPECTOR REPORT",
    "title_insurance": "INSURANCE CLAIM REPORT",
    # Section headers
    "welcome": "WELCOME",
    "roof_overview": "YOUR ROOF OVERVIEW",
    "what_we_found": "WHAT WE FOUND",
    "recommendations": "OUR RECOMMENDATIONS",
    "budget_planning": "BUDGET PLANNING",
    "glossary": "ROOFING TERMS EXPLAINED",
    "cost_summary": "COST SUMMARY",
    "project_details": "PROJECT DETAILS",
    "scope_of_work": "SCOPE OF WORK",
    "labor_equipment": "LABOR & EQUIPMENT",
    "material_breakdown": "MATERIAL BREAKDOWN",
    "cost_estimates": "COST ESTIMATES",
    "inspector_certification": "INSPECTOR CERTIFICATION",
    "inspection_details": "INSPECTION DETAILS",
    "property_location": "PROPERTY LOCATION",
    "structure_analysis": "STRUCTURE ANALYSIS",
    "slope_conditions": "SLOPE-BY-SLOPE CONDITIONS",
    "components_assessment": "ROOFING COMPONENTS ASSESSMENT",
    "notes_equipment": "INSPECTOR NOTES & EQUIPMENT",
    "claim_metadata": "CLAIM METADATA",
    "inspection_summary": "INSPECTION SUMMARY",
    "coverage_analysis": "COVERAGE ANALYSIS",
    "storm_damage": "STORM DAMAGE ASSESSMENT",
    "damage_classifications": "DAMAGE CLASSIFICATIONS",
    "legal_certification": "LEGAL CERTIFICATION",
    # Homeowner labels
    "property_type": "Property Type:",
    "roof_age": "Roof Age:",
    "roof_style": "Roof Style:",
    "current_materials": "Current Materials:",
    "overall_condition": "Overall Condition:",
    "key_features": "Key Features:",
    "priority_level": "Priority Level:",
    "inspection_findings": "Inspection Findings:",
    "main_concerns": "Main Concerns:",
    "what_this_means": "What This Means for You:",
    "immediate_actions": "Immediate Actions:",
    "short_term_planning": "Short Term Planning (3-6 months):",
    "long_term_outlook": "Long Term Outlook:",
    "timeline": "Timeline:",
    "investment": "Investment:",
    "care": "Care:",
    "estimated_ranges": "Estimated Cost Ranges:",
    "repairs": "Repairs:",
    "partial_replacement": "Partial Replacement:",
    "full_replacement": "Full Replacement:",
    "financing_options": "Financing Options:",
    "cost_saving_tips": "Cost-Saving Tips:",
    # Cost summary
    "materials_cost": "Materials:",
    "labor_cost": "Labor:",
    "permits_cost": "Permits:",
    "contingency_cost": "Contingency (7%):",
    "total_cost": "Total Estimate:",
    # Contractor labels
    "project_address": "Project Address:",
    "project_type": "Project Type:",
    "job_type": "Job Type:",
    "material_preference": "Material Preference:",
    "total_area": "Total Area:",
    "roof_pitch": "Roof Pitch:",
    "structure_type": "Structure Type:",
    "existing_materials": "Existing Materials:",
    "local_permit": "Local Permit Required:",
    "preparation_tasks": "Preparation Tasks:",
    "removal_tasks": "Removal Tasks:",
    "installation_tasks": "Installation Tasks:",
    "finishing_tasks": "Finishing Tasks:",
    "crew_size": "Crew Size:",
    "estimated_days": "Estimated Days:",
    "steep_assist": "Steep Assist:",
    "special_equipment": "Special Equipment:",
    "safety_requirements": "Safety Requirements:",
    "col_item": "Item",
    "col_qty": "Qty",
    "col_unit": "Unit",
    "col_notes": "Notes",
    "materials_breakdown": "Materials Cost Breakdown:",
    "total_materials": "Total Materials Cost:",
    "labor_section": "Labor Cost:",
    "rate_per_hour": "Rate per Hour:",
    "total_hours": "Total Hours:",
    "total_labor": "Total Labor Cost:",
    "equipment_section": "Equipment Cost:",
    "total_equipment": "Total Equipment Cost:",
    "project_total": "PROJECT TOTAL:",
    "workers": "workers",
    "days": "days",
    "required": "Required",
    "not_required": "Not required",
    "yes": "Yes",
    "no": "No",
    # Inspector labels
    "inspector": "Inspector:",
    "license": "License:",
    "contact": "Contact:",
    "date": "Date:",
    "weather_conditions": "Weather Conditions:",
    "address": "Address:",
    "type": "Type:",
    "age": "Age:",
    "materials": "Materials:",
    "slope": "Slope",
    "damage_type": "Damage Type:",
    "severity": "Severity:",
    "description": "Description:",
    "no_slope_damage": "No slope damage reported",
    "felt": "Felt:",
    "ice_water_shield": "Ice/Water Shield:",
    "drip_edge": "Drip Edge:",
    "gutter_apron": "Gutter Apron:",
    "pipe_boots": "Pipe Boots:",
    "fascia_condition": "Fascia Condition:",
    "gutter_condition": "Gutter Condition:",
    "present": "Present",
    "not_present": "Not present",
    "equipment_used": "Equipment Used:",
    "owner_notes": "Owner Notes:",
    # Insurance labels
    "claim_number": "Claim Number:",
    "policyholder": "Policyholder:",
    "adjuster": "Adjuster:",
    "date_of_loss": "Date of Loss:",
    "date_of_inspection": "Date of Inspection:",
    "property_address": "Property Address:",
    "covered_items": "Covered Items:",
    "non_covered_items": "Non-Covered Items:",
    "maintenance_items": "Maintenance Items:",
    "no_covered_items": "No covered items specified",
    "no_non_covered_items": "No non-covered items specified",
    "primary_damage_cause": "Primary Damage Cause:",
    "affected_components": "Affected Components:",
    "no_affected_components": "No affected components specified",
    "slope_heading": "Slope:",
    # Photo pages
    "photo_title_homeowner": "Photo {n} - What You're Seeing",
    "photo_title_contractor": "Project Image {n} - Repair Analysis",
    "photo_title_inspector": "PHOTOGRAPHIC EVIDENCE {n}",
    "photo_title_insurance": "CLAIM EVIDENCE {n}",
    "photo_caption_homeowner": "What This Photo Shows:",
    "photo_caption_contractor": "Contractor Analysis & Repair Indicators:",
    "image_name_inspector": "Image:",
    "image_size_inspector": "Size:",
    "image_name_insurance": "Documentation:",
    "image_size_insurance": "File Reference:",
    "insurance_use_only": "For Insurance Documentation Purposes Only",
    "no_image": "[No image available]",
    "image_failed": "[Image could not be loaded]",
}

SPANISH: Dict[str, str] = {
    "title_homeowner": "INFORME DE EVALUACIÓN DE SU TECHO",
    "title_contractor": "INFORME DE PROYECTO PARA CONTRATISTAS",
    "title_inspector": "INFORME PROFESIONAL DE INSPECCIÓN",
    "title_insurance": "INFORME DE RECLAMO DE SEGURO",
    "welcome": "BIENVENIDA",
    "roof_overview": "RESUMEN DE SU TECHO",
    "what_we_found": "LO QUE ENCONTRAMOS",
    "recommendations": "NUESTRAS RECOMENDACIONES",
    "budget_planning": "PLANIFICACIÓN DEL PRESUPUESTO",
    "glossary": "TÉRMINOS DE TECHADO EXPLICADOS",
    "cost_summary": "RESUMEN DE COSTOS",
    "project_details": "DETALLES DEL PROYECTO",
    "scope_of_work": "ALCANCE DEL TRABAJO",
    "labor_equipment": "MANO DE OBRA Y EQUIPO",
    "material_breakdown": "DESGLOSE DE MATERIALES",
    "cost_estimates": "ESTIMACIONES DE COSTOS",
    "inspector_certification": "CERTIFICACIÓN DEL INSPECTOR",
    "inspection_details": "DETALLES DE LA INSPECCIÓN",
    "property_location": "UBICACIÓN DE LA PROPIEDAD",
    "structure_analysis": "ANÁLISIS DE LA ESTRUCTURA",
    "slope_conditions": "CONDICIONES POR PENDIENTE",
    "components_assessment": "EVALUACIÓN DE COMPONENTES DEL TECHO",
    "notes_equipment": "NOTAS Y EQUIPO DEL INSPECTOR",
    "claim_metadata": "DATOS DEL RECLAMO",
    "inspection_summary": "RESUMEN DE LA INSPECCIÓN",
    "coverage_analysis": "ANÁLISIS DE COBERTURA",
    "storm_damage": "EVALUACIÓN DE DAÑOS POR TORMENTA",
    "damage_classifications": "CLASIFICACIÓN DE DAÑOS",
    "legal_certification": "CERTIFICACIÓN LEGAL",
    "property_type": "Tipo de propiedad:",
    "roof_age": "Edad del techo:",
    "roof_style": "Estilo del techo:",
    "current_materials": "Materiales actuales:",
    "overall_condition": "Condición general:",
    "key_features": "Características clave:",
    "priority_level": "Nivel de prioridad:",
    "main_concerns": "Preocupaciones principales:",
    "immediate_actions": "Acciones inmediatas:",
    "repairs": "Reparaciones:",
    "partial_replacement": "Reemplazo parcial:",
    "full_replacement": "Reemplazo completo:",
    "financing_options": "Opciones de financiamiento:",
    "materials_cost": "Materiales:",
    "labor_cost": "Mano de obra:",
    "permits_cost": "Permisos:",
    "contingency_cost": "Contingencia (7%):",
    "total_cost": "Estimación total:",
    "project_address": "Dirección del proyecto:",
    "project_type": "Tipo de proyecto:",
    "total_area": "Área total:",
    "roof_pitch": "Pendiente del techo:",
    "crew_size": "Tamaño del equipo:",
    "col_item": "Artículo",
    "col_qty": "Cant.",
    "col_unit": "Unidad",
    "col_notes": "Notas",
    "project_total": "TOTAL DEL PROYECTO:",
    "inspector": "Inspector:",
    "license": "Licencia:",
    "contact": "Contacto:",
    "date": "Fecha:",
    "address": "Dirección:",
    "present": "Presente",
    "not_present": "No presente",
    "claim_number": "Número de reclamo:",
    "policyholder": "Asegurado:",
    "adjuster": "Ajustador:",
    "date_of_loss": "Fecha de la pérdida:",
    "covered_items": "Elementos cubiertos:",
    "non_covered_items": "Elementos no cubiertos:",
    "no_image": "[Imagen no disponible]",
}

FRENCH: Dict[str, str] = {
    "title_homeowner": "RAPPORT D'ÉVALUATION DE VOTRE TOITURE",
    "title_contractor": "RAPPORT DE PROJET ENTREPRENEUR",
    "title_inspector": "RAPPORT D'INSPECTION PROFESSIONNEL",
    "title_insurance": "RAPPORT DE SINISTRE",
    "welcome": "BIENVENUE",
    "roof_overview": "APERÇU DE VOTRE TOITURE",
    "what_we_found": "NOS CONSTATATIONS",
    "recommendations": "NOS RECOMMANDATIONS",
    "budget_planning": "PLANIFICATION DU BUDGET",
    "glossary": "LEXIQUE DE LA TOITURE",
    "cost_summary": "RÉCAPITULATIF DES COÛTS",
    "project_details": "DÉTAILS DU PROJET",
    "scope_of_work": "ÉTENDUE DES TRAVAUX",
    "labor_equipment": "MAIN-D'ŒUVRE ET ÉQUIPEMENT",
    "material_breakdown": "DÉTAIL DES MATÉRIAUX",
    "cost_estimates": "ESTIMATIONS DES COÛTS",
    "inspector_certification": "CERTIFICATION DE L'INSPECTEUR",
    "inspection_details": "DÉTAILS DE L'INSPECTION",
    "property_location": "EMPLACEMENT DE LA PROPRIÉTÉ",
    "structure_analysis": "ANALYSE DE LA STRUCTURE",
    "slope_conditions": "ÉTAT PAR VERSANT",
    "components_assessment": "ÉVALUATION DES COMPOSANTS",
    "notes_equipment": "NOTES ET ÉQUIPEMENT DE L'INSPECTEUR",
    "claim_metadata": "INFORMATIONS SUR LE SINISTRE",
    "inspection_summary": "RÉSUMÉ DE L'INSPECTION",
    "coverage_analysis": "ANALYSE DE LA COUVERTURE",
    "storm_damage": "ÉVALUATION DES DOMMAGES DE TEMPÊTE",
    "damage_classifications": "CLASSIFICATION DES DOMMAGES",
    "legal_certification": "CERTIFICATION LÉGALE",
    "property_type": "Type de propriété :",
    "roof_age": "Âge de la toiture :",
    "current_materials": "Matériaux actuels :",
    "overall_condition": "État général :",
    "priority_level": "Niveau de priorité :",
    "repairs": "Réparations :",
    "partial_replacement": "Remplacement partiel :",
    "full_replacement": "Remplacement complet :",
    "materials_cost": "Matériaux :",
    "labor_cost": "Main-d'œuvre :",
    "permits_cost": "Permis :",
    "contingency_cost": "Imprévus (7 %) :",
    "total_cost": "Estimation totale :",
    "col_item": "Article",
    "col_qty": "Qté",
    "col_unit": "Unité",
    "col_notes": "Remarques",
    "project_total": "TOTAL DU PROJET :",
    "license": "Licence :",
    "date": "Date :",
    "address": "Adresse :",
    "present": "Présent",
    "not_present": "Absent",
    "claim_number": "Numéro de sinistre :",
    "policyholder": "Assuré :",
    "covered_items": "Éléments couverts :",
    "non_covered_items": "Éléments non couverts :",
    "no_image": "[Aucune image disponible]",
}

GERMAN: Dict[str, str] = {
    "title_homeowner": "IHR DACHGUTACHTEN",
    "title_contractor": "PROJEKTBERICHT FÜR AUFTRAGNEHMER",
    "title_inspector": "PROFESSIONELLER INSPEKTIONSBERICHT",
    "title_insurance": "VERSICHERUNGSSCHADENBERICHT",
    "welcome": "WILLKOMMEN",
    "roof_overview": "ÜBERBLICK ÜBER IHR DACH",
    "what_we_found": "UNSERE FESTSTELLUNGEN",
    "recommendations": "UNSERE EMPFEHLUNGEN",
    "budget_planning": "BUDGETPLANUNG",
    "glossary": "DACHBEGRIFFE ERKLÄRT",
    "cost_summary": "KOSTENÜBERSICHT",
    "project_details": "PROJEKTDETAILS",
    "scope_of_work": "LEISTUNGSUMFANG",
    "labor_equipment": "ARBEIT & AUSRÜSTUNG",
    "material_breakdown": "MATERIALAUFSTELLUNG",
    "cost_estimates": "KOSTENSCHÄTZUNG",
    "inspector_certification": "ZERTIFIZIERUNG DES GUTACHTERS",
    "inspection_details": "INSPEKTIONSDETAILS",
    "property_location": "STANDORT DER IMMOBILIE",
    "structure_analysis": "BAUWERKSANALYSE",
    "slope_conditions": "ZUSTAND JE DACHFLÄCHE",
    "components_assessment": "BEWERTUNG DER DACHKOMPONENTEN",
    "notes_equipment": "NOTIZEN & AUSRÜSTUNG",
    "claim_metadata": "SCHADENSDATEN",
    "inspection_summary": "INSPEKTIONSZUSAMMENFASSUNG",
    "coverage_analysis": "DECKUNGSANALYSE",
    "storm_damage": "BEWERTUNG VON STURMSCHÄDEN",
    "damage_classifications": "SCHADENSKLASSIFIZIERUNG",
    "legal_certification": "RECHTLICHE BESTÄTIGUNG",
    "materials_cost": "Material:",
    "labor_cost": "Arbeit:",
    "permits_cost": "Genehmigungen:",
    "contingency_cost": "Reserve (7 %):",
    "total_cost": "Gesamtschätzung:",
    "col_item": "Position",
    "col_qty": "Menge",
    "col_unit": "Einheit",
    "col_notes": "Hinweise",
    "project_total": "PROJEKTSUMME:",
    "present": "Vorhanden",
    "not_present": "Nicht vorhanden",
    "no_image": "[Kein Bild verfügbar]",
}

ITALIAN: Dict[str, str] = {
    "title_homeowner": "RAPPORTO DI VALUTAZIONE DEL TETTO",
    "title_contractor": "RAPPORTO DI PROGETTO PER L'IMPRESA",
    "title_inspector": "RAPPORTO DI ISPEZIONE PROFESSIONALE",
    "title_insurance": "RAPPORTO DI SINISTRO ASSICURATIVO",
    "welcome": "BENVENUTO",
    "roof_overview": "PANORAMICA DEL TETTO",
    "what_we_found": "COSA ABBIAMO TROVATO",
    "recommendations": "LE NOSTRE RACCOMANDAZIONI",
    "budget_planning": "PIANIFICAZIONE DEL BUDGET",
    "glossary": "GLOSSARIO DEI TERMINI",
    "cost_summary": "RIEPILOGO DEI COSTI",
    "project_details": "DETTAGLI DEL PROGETTO",
    "scope_of_work": "AMBITO DEI LAVORI",
    "labor_equipment": "MANODOPERA E ATTREZZATURE",
    "material_breakdown": "DETTAGLIO DEI MATERIALI",
    "cost_estimates": "STIME DEI COSTI",
    "inspector_certification": "CERTIFICAZIONE DELL'ISPETTORE",
    "inspection_details": "DETTAGLI DELL'ISPEZIONE",
    "property_location": "UBICAZIONE DELL'IMMOBILE",
    "structure_analysis": "ANALISI DELLA STRUTTURA",
    "claim_metadata": "DATI DEL SINISTRO",
    "inspection_summary": "RIEPILOGO DELL'ISPEZIONE",
    "coverage_analysis": "ANALISI DELLA COPERTURA",
    "storm_damage": "VALUTAZIONE DEI DANNI DA TEMPESTA",
    "damage_classifications": "CLASSIFICAZIONE DEI DANNI",
    "legal_certification": "CERTIFICAZIONE LEGALE",
    "total_cost": "Stima totale:",
    "project_total": "TOTALE PROGETTO:",
}

PORTUGUESE: Dict[str, str] = {
    "title_homeowner": "RELATÓRIO DE AVALIAÇÃO DO SEU TELHADO",
    "title_contractor": "RELATÓRIO DE PROJETO PARA EMPREITEIROS",
    "title_inspector": "RELATÓRIO PROFISSIONAL DE INSPEÇÃO",
    "title_insurance": "RELATÓRIO DE SINISTRO",
    "welcome": "BOAS-VINDAS",
    "roof_overview": "VISÃO GERAL DO SEU TELHADO",
    "what_we_found": "O QUE ENCONTRAMOS",
    "recommendations": "NOSSAS RECOMENDAÇÕES",
    "budget_planning": "PLANEJAMENTO DO ORÇAMENTO",
    "glossary": "TERMOS DE TELHADO EXPLICADOS",
    "cost_summary": "RESUMO DE CUSTOS",
    "project_details": "DETALHES DO PROJETO",
    "scope_of_work": "ESCOPO DO TRABALHO",
    "labor_equipment": "MÃO DE OBRA E EQUIPAMENTOS",
    "material_breakdown": "DISCRIMINAÇÃO DE MATERIAIS",
    "cost_estimates": "ESTIMATIVAS DE CUSTO",
    "inspector_certification": "CERTIFICAÇÃO DO INSPETOR",
    "inspection_details": "DETALHES DA INSPEÇÃO",
    "property_location": "LOCALIZAÇÃO DO IMÓVEL",
    "structure_analysis": "ANÁLISE DA ESTRUTURA",
    "claim_metadata": "DADOS DO SINISTRO",
    "inspection_summary": "RESUMO DA INSPEÇÃO",
    "coverage_analysis": "ANÁLISE DE COBERTURA",
    "storm_damage": "AVALIAÇÃO DE DANOS DE TEMPESTADE",
    "damage_classifications": "CLASSIFICAÇÃO DE DANOS",
    "legal_certification": "CERTIFICAÇÃO LEGAL",
    "total_cost": "Estimativa total:",
    "project_total": "TOTAL DO PROJETO:",
}

CHINESE: Dict[str, str] = {
    "title_homeowner": "屋顶评估报告",
    "title_contractor": "承包商项目报告",
    "title_inspector": "专业检查报告",
    "title_insurance": "保险理赔报告",
    "welcome": "欢迎",
    "roof_overview": "屋顶概况",
    "what_we_found": "检查发现",
    "recommendations": "我们的建议",
    "budget_planning": "预算规划",
    "glossary": "屋顶术语说明",
    "cost_summary": "费用汇总",
    "project_details": "项目详情",
    "scope_of_work": "工作范围",
    "labor_equipment": "人工与设备",
    "material_breakdown": "材料明细",
    "cost_estimates": "费用估算",
    "inspector_certification": "检查员认证",
    "inspection_details": "检查详情",
    "property_location": "物业位置",
    "structure_analysis": "结构分析",
    "claim_metadata": "理赔信息",
    "inspection_summary": "检查摘要",
    "coverage_analysis": "承保分析",
    "storm_damage": "风暴损害评估",
    "damage_classifications": "损害分类",
    "legal_certification": "法律声明",
    "total_cost": "总估算:",
    "project_total": "项目总计:",
}

JAPANESE: Dict[str, str] = {
    "title_homeowner": "屋根診断レポート",
    "title_contractor": "施工業者向けプロジェクトレポート",
    "title_inspector": "専門検査レポート",
    "title_insurance": "保険請求レポート",
    "welcome": "ごあいさつ",
    "roof_overview": "屋根の概要",
    "what_we_found": "調査結果",
    "recommendations": "推奨事項",
    "budget_planning": "予算計画",
    "glossary": "屋根用語の解説",
    "cost_summary": "費用概要",
    "project_details": "プロジェクト詳細",
    "scope_of_work": "作業範囲",
    "labor_equipment": "作業員と機材",
    "material_breakdown": "資材内訳",
    "cost_estimates": "費用見積もり",
    "inspector_certification": "検査員の資格",
    "inspection_details": "検査詳細",
    "property_location": "物件所在地",
    "structure_analysis": "構造分析",
    "claim_metadata": "請求情報",
    "inspection_summary": "検査概要",
    "coverage_analysis": "補償範囲の分析",
    "storm_damage": "暴風被害の評価",
    "damage_classifications": "損傷の分類",
    "legal_certification": "法的証明",
    "total_cost": "見積総額:",
    "project_total": "プロジェクト合計:",
}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "english": ENGLISH,
    "spanish": SPANISH,
    "french": FRENCH,
    "german": GERMAN,
    "italian": ITALIAN,
    "portuguese": PORTUGUESE,
    "chinese": CHINESE,
    "japanese": JAPANESE,
}


# =============================================================================
# PUBLIC API
# =============================================================================


def normalize_language(language: Optional[str]) -> str:
    """Resolve a language name or ISO code to a supported language name."""
    if not language:
        return DEFAULT_LANGUAGE
    key = language.strip().lower()
    key = LANGUAGE_ALIASES.get(key, key)
    return key if key in TRANSLATIONS else DEFAULT_LANGUAGE


def normalize_currency(currency: Optional[str]) -> str:
    """Resolve a currency code, falling back to USD for unknown codes."""
    if not currency:
        return DEFAULT_CURRENCY
    code = currency.strip().upper()
    return code if code in CURRENCY_SYMBOLS else DEFAULT_CURRENCY


def translate(key: str, language: Optional[str] = None) -> str:
    """Look up the text for a key in the requested language.

    Falls back to English when the language or the key is missing there, and
    to the key itself when English lacks it too.
    """
    table = TRANSLATIONS.get(normalize_language(language), ENGLISH)
    if key in table:
        return table[key]
    if key in ENGLISH:
        return ENGLISH[key]
    logger.debug("translation_missing", key=key, language=language)
    return key


def format_currency(amount: Union[int, float], currency: Optional[str] = None) -> str:
    """Format an amount with the currency symbol and thousands separators.

    Whole amounts are shown without decimals and others with two, except for
    zero-decimal currencies which are always rounded to whole units.

    Examples:
        >>> format_currency(117300)
        '$117,300'
        >>> format_currency(1234.5, "EUR")
        '€1,234.50'
    """
    code = normalize_currency(currency)
    symbol = CURRENCY_SYMBOLS[code]
    sign = "-" if amount < 0 else ""
    value = abs(amount)

    if code in ZERO_DECIMAL_CURRENCIES or float(value).is_integer():
        body = f"{int(round(value)):,}"
    else:
        body = f"{value:,.2f}"
    return f"{sign}{symbol}{body}"


@dataclass(frozen=True)
class Localizer:
    """Language and currency preferences for one report."""

    language: str = DEFAULT_LANGUAGE
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def for_preferences(cls, language: Optional[str], currency: Optional[str]) -> "Localizer":
        return cls(
            language=normalize_language(language or settings.default_language),
            currency=normalize_currency(currency or settings.default_currency),
        )

    def t(self, key: str, **kwargs) -> str:
        text = translate(key, self.language)
        return text.format(**kwargs) if kwargs else text

    def money(self, amount: Union[int, float]) -> str:
        return format_currency(amount, self.currency)
