# Marketplace menu seed used by the in-memory product catalog.
# Prices and extra costs are strings so they load exactly as Decimal.

RESTAURANTS = [
    {
        "id": "al-andalus",
        "name": "Al Andalus",
        "menu": [
            {
                "id": "shawarma-pollo-andalus",
                "name": "Shawarma de Pollo Al Andalus",
                "price": "12",
                "sides": [
                    {
                        "category": "Contorno",
                        "required": True,
                        "options": [
                            {"name": "Papas fritas"},
                            {"name": "Arroz árabe"},
                            {"name": "Tabbouleh", "extra_cost": "2"},
                            {"name": "Hummus", "extra_cost": "1.5"},
                        ],
                    },
                    {
                        "category": "Salsa",
                        "required": False,
                        "options": [{"name": "Tahini"}, {"name": "Ajo"}, {"name": "Picante"}],
                    },
                ],
            },
            {
                "id": "shawarma-carne-andalus",
                "name": "Shawarma de Carne Al Andalus",
                "price": "14",
                "sides": [
                    {
                        "category": "Contorno",
                        "required": True,
                        "options": [
                            {"name": "Papas fritas"},
                            {"name": "Arroz árabe"},
                            {"name": "Tabbouleh", "extra_cost": "2"},
                        ],
                    },
                ],
            },
            {
                "id": "pizza-arabe-carne-andalus",
                "name": "Pizza Árabe de Carne Al Andalus",
                "price": "16",
                "sides": [
                    {
                        "category": "Tamaño",
                        "required": True,
                        "options": [
                            {"name": 'Personal (8")'},
                            {"name": 'Mediana (12")', "extra_cost": "4"},
                            {"name": 'Familiar (16")', "extra_cost": "8"},
                        ],
                    },
                ],
            },
            {"id": "knafe-andalus", "name": "Knafe Al Andalus", "price": "8"},
        ],
    },
    {
        "id": "muna",
        "name": "Muna",
        "menu": [
            {
                "id": "pinchos-pollo-muna",
                "name": "Pinchos de Pollo Muna",
                "price": "13",
                "sides": [
                    {
                        "category": "Contorno",
                        "required": True,
                        "options": [
                            {"name": "Arroz árabe"},
                            {"name": "Papas fritas"},
                            {"name": "Tabbouleh", "extra_cost": "2"},
                        ],
                    },
                    {
                        "category": "Salsa",
                        "required": False,
                        "options": [{"name": "Salsa de ajo"}, {"name": "Tahini"}, {"name": "Picante"}],
                    },
                ],
            },
            {
                "id": "tabbouleh-muna",
                "name": "Tabbouleh Muna",
                "price": "8",
                "sides": [
                    {
                        "category": "Tamaño",
                        "required": True,
                        "options": [
                            {"name": "Individual"},
                            {"name": "Para compartir", "extra_cost": "4"},
                        ],
                    },
                ],
            },
        ],
    },
    {
        "id": "pizza-jardin",
        "name": "Pizza Jardín",
        "menu": [
            {
                "id": "margherita-jardin",
                "name": "Pizza Margherita",
                "price": "16",
                "sides": [
                    {
                        "category": "Tamaño",
                        "required": True,
                        "options": [
                            {"name": 'Personal (8")'},
                            {"name": 'Mediana (12")', "extra_cost": "4"},
                            {"name": 'Familiar (16")', "extra_cost": "8"},
                        ],
                    },
                ],
            },
        ],
    },
    {
        "id": "maacaruna",
        "name": "Maacaruna",
        "menu": [
            {
                "id": "pasta-bolognesa-maacaruna",
                "name": "Pasta Boloñesa",
                "price": "14",
                "sides": [
                    {
                        "category": "Tipo de Pasta",
                        "required": True,
                        "options": [
                            {"name": "Spaghetti"},
                            {"name": "Penne"},
                            {"name": "Fettuccine", "extra_cost": "1"},
                            {"name": "Rigatoni", "extra_cost": "1"},
                        ],
                    },
                ],
            },
        ],
    },
    {
        "id": "zona-bodegon",
        "name": "Zona Bodegón",
        "menu": [
            {
                "id": "coca-cola-bodegon",
                "name": "Coca Cola",
                "price": "3",
                "sides": [
                    {
                        "category": "Tamaño",
                        "required": True,
                        "options": [
                            {"name": "Lata 355ml"},
                            {"name": "Botella 500ml", "extra_cost": "1"},
                            {"name": "Botella 1.5L", "extra_cost": "3"},
                        ],
                    },
                ],
            },
            {"id": "agua-mineral-bodegon", "name": "Agua Mineral", "price": "2"},
        ],
    },
]
