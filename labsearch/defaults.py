"""ソースが使えない場合のデフォルト検査リスト."""

DEFAULT_SECTOR_NAMES: dict[str, str] = {
    "HEM": "Hématologie",
    "BIO": "Biochimie",
    "HOR": "Hormonologie",
    "IMM": "Immunologie",
    "SER": "Sérologie",
    "MIC": "Microbiologie",
}

DEFAULT_RECORDS: tuple[dict, ...] = (
    {
        "code": "NFS",
        "name": "Numération Formule Sanguine",
        "sector": "HEM",
        "delay": "24h",
        "price": 80.0,
        "description": "Hémogramme complet : globules rouges, globules blancs et plaquettes.",
    },
    {
        "code": "GLY",
        "name": "Glycémie à jeun",
        "sector": "BIO",
        "delay": "24h",
        "price": 20.0,
        "description": "Dosage du glucose sanguin après 8 heures de jeûne.",
    },
    {
        "code": "HBA1C",
        "name": "Hémoglobine glyquée (HbA1c)",
        "sector": "BIO",
        "delay": "48h",
        "price": 150.0,
        "description": "Équilibre glycémique moyen sur les trois derniers mois.",
    },
    {
        "code": "CHOL",
        "name": "Cholestérol total",
        "sector": "BIO",
        "delay": "24h",
        "price": 30.0,
        "description": "Dosage du cholestérol sérique total.",
    },
    {
        "code": "TSH",
        "name": "TSH ultrasensible",
        "sector": "HOR",
        "delay": "48h",
        "price": 120.0,
        "description": "Exploration de la fonction thyroïdienne.",
    },
    {
        "code": "PRL",
        "name": "Prolactine",
        "sector": "HOR",
        "delay": "48h",
        "price": 140.0,
        "description": "Dosage de la prolactine sérique.",
    },
    {
        "code": "HBS",
        "name": "Hépatite B - Antigène HBs",
        "sector": "SER",
        "delay": "48h",
        "price": 110.0,
        "description": "Dépistage de l'infection par le virus de l'hépatite B.",
    },
    {
        "code": "HIV",
        "name": "Sérologie HIV 1 et 2",
        "sector": "SER",
        "delay": "72h",
        "price": 160.0,
        "description": "Recherche des anticorps anti-VIH 1 et 2 et de l'antigène p24.",
    },
    {
        "code": "PSA",
        "name": "PSA total",
        "sector": "IMM",
        "delay": "48h",
        "price": 200.0,
        "description": "Antigène prostatique spécifique, suivi de la prostate.",
    },
    {
        "code": "TROP",
        "name": "Troponine I ultrasensible",
        "sector": "BIO",
        "delay": "4h",
        "price": 250.0,
        "description": "Marqueur de souffrance myocardique.",
    },
    {
        "code": "CREA",
        "name": "Créatinine",
        "sector": "BIO",
        "delay": "24h",
        "price": 25.0,
        "description": "Évaluation de la fonction rénale.",
    },
    {
        "code": "B12",
        "name": "Vitamine B12",
        "sector": "BIO",
        "delay": "72h",
        "price": 180.0,
        "description": "Dosage de la cobalamine sérique.",
    },
    {
        "code": "FERR",
        "name": "Ferritine",
        "sector": "BIO",
        "delay": "48h",
        "price": 130.0,
        "description": "Évaluation des réserves en fer de l'organisme.",
    },
    {
        "code": "ECBU",
        "name": "ECBU - Examen cytobactériologique des urines",
        "sector": "MIC",
        "delay": "72h",
        "price": 90.0,
        "description": "Recherche d'une infection urinaire avec antibiogramme si positif.",
    },
    {
        "code": "AAN",
        "name": "Anticorps antinucléaires",
        "sector": "IMM",
        "delay": "5 jours",
        "price": 220.0,
        "description": "Dépistage des maladies auto-immunes systémiques.",
    },
    {
        "code": "VS",
        "name": "Vitesse de sédimentation",
        "sector": "HEM",
        "delay": "24h",
        "price": 25.0,
        "description": "Marqueur non spécifique de l'inflammation.",
    },
)
