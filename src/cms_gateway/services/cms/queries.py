"""GraphQL documents used by the resource services.

Field names follow the CMS content types verbatim, including misspelled
ones (``MinimumDownPaymet``, ``MinimuDownpayment``, ``MinimumInstallements``).
List queries take a ``$pageSize`` so a whole listing arrives in one round
trip.
"""

# =============================================================================
# Brands
# =============================================================================

GET_BRANDS_QUERY = """
query GetBrands($pageSize: Int) {
  brands(pagination: { pageSize: $pageSize }) {
    documentId
    Name
    Logo {
      documentId
      url
      width
      height
      formats
    }
  }
}
"""

GET_BRAND_BY_ID_QUERY = """
query GetBrand($documentId: ID!) {
  brand(documentId: $documentId) {
    documentId
    Name
    Slug
    Logo {
      documentId
      url
      width
      height
      formats
    }
  }
}
"""

# =============================================================================
# Car Models
# =============================================================================

GET_CAR_MODELS_BY_BRAND_QUERY = """
query GetCarModelsByBrand($brandDocumentId: ID!, $pageSize: Int) {
  carModels(
    filters: { brand: { documentId: { eq: $brandDocumentId } } }
    pagination: { pageSize: $pageSize }
  ) {
    documentId
    Name
    Images {
      documentId
      url
      width
      height
      formats
    }
  }
}
"""

GET_CAR_MODEL_BY_ID_QUERY = """
query GetCarModel($documentId: ID!) {
  carModel(documentId: $documentId) {
    documentId
    Name
    BodyType
    FuelType
    Slug
    Images {
      documentId
      url
      width
      height
      formats
    }
  }
}
"""

# =============================================================================
# Car Variants
# =============================================================================

GET_VARIANT_PRICES_BY_MODEL_QUERY = """
query GetCarVariantPrices($carModelDocumentId: ID!, $pageSize: Int) {
  carVariants(
    filters: { car_model: { documentId: { eq: $carModelDocumentId } } }
    pagination: { pageSize: $pageSize }
  ) {
    documentId
    Price
  }
}
"""

GET_CAR_VARIANTS_BY_MODEL_QUERY = """
query GetCarVariants($carModelDocumentId: ID!, $pageSize: Int) {
  carVariants(
    filters: { car_model: { documentId: { eq: $carModelDocumentId } } }
    pagination: { pageSize: $pageSize }
  ) {
    documentId
    Name
    Price
    Year
    BrochureURL
    ReviewLink
    Warranty
    MinimumDownPaymet
    MinimumInstallments
    Specs {
      Motor
    }
    ShowroomPricing {
      Price
      MinimuDownpayment
      MinimumInstallements
      showroom {
        documentId
        Name
        Logo {
          documentId
          url
          width
          height
          formats
        }
      }
    }
  }
}
"""

GET_CAR_VARIANT_BY_ID_QUERY = """
query GetCarVariant($documentId: ID!) {
  carVariant(documentId: $documentId) {
    documentId
    Name
    Price
    Year
    BrochureURL
    ReviewLink
    Warranty
    MinimumDownPaymet
    MinimumInstallments
    car_model {
      documentId
      Name
      Images {
        documentId
        url
        width
        height
        formats
      }
    }
    Specs {
      Motor
      Transmission
      Acceleration
      AssembledIn
      GroundClearanceInMM
      HeightInMM
      Horsepower
      LengthInMM
      LiterPerKM
      MaxSpeed
      Origin
      Speed
      TractionType
      TrunkSize
      WheelBase
      WidthInMM
      Seats
    }
    Features
    ShowroomPricing {
      Price
      MinimuDownpayment
      MinimumInstallements
      showroom {
        documentId
        Name
        Logo {
          documentId
          url
          width
          height
          formats
        }
      }
    }
  }
}
"""

# =============================================================================
# Advertisements
# =============================================================================

GET_ADVERTISEMENTS_QUERY = """
query GetAdvertisements($pageSize: Int) {
  advertisements(pagination: { pageSize: $pageSize }) {
    documentId
    Action
    Banner {
      documentId
      name
      url
      width
      height
      formats
    }
  }
}
"""

GET_ADVERTISEMENT_BY_ID_QUERY = """
query GetAdvertisement($documentId: ID!) {
  advertisement(documentId: $documentId) {
    documentId
    Action
    Banner {
      documentId
      name
      url
      width
      height
      formats
    }
  }
}
"""

# =============================================================================
# Showrooms
# =============================================================================

GET_SHOWROOMS_QUERY = """
query GetShowrooms($pageSize: Int) {
  showrooms(pagination: { pageSize: $pageSize }) {
    documentId
    Name
    Description
    IsVerified
    IsFeatured
    Logo {
      documentId
      url
      width
      height
      formats
    }
  }
}
"""

GET_SHOWROOM_BY_ID_QUERY = """
query GetShowroomProfile($documentId: ID!) {
  showroom(documentId: $documentId) {
    documentId
    Name
    Description
    IsVerified
    IsFeatured
    OperatingHours
    Logo {
      documentId
      url
      width
      height
      formats
    }
    Cover {
      documentId
      url
      width
      height
      formats
    }
    Location {
      Address
      governorate {
        documentId
        Name
      }
      city {
        documentId
        Name
      }
      Latitude
      Longitude
    }
    ContactInfo {
      Email
      Phone
      Facebook
      Instagram
      Tiktok
      Whatsapp
      X
      Youtube
      WebsiteURL
    }
  }
}
"""

GET_CAR_VARIANTS_BY_SHOWROOM_QUERY = """
query GetCarVariantsByShowroom($showroomDocumentId: ID!, $pageSize: Int) {
  carVariants(
    filters: { ShowroomPricing: { showroom: { documentId: { eq: $showroomDocumentId } } } }
    pagination: { pageSize: $pageSize }
  ) {
    documentId
    Name
    DisplayName
    Images {
      documentId
      url
      width
      height
      formats
    }
    ShowroomPricing(filters: { showroom: { documentId: { eq: $showroomDocumentId } } }) {
      Price
      MinimuDownpayment
      MinimumInstallements
    }
  }
}
"""

# =============================================================================
# Governorates
# =============================================================================

GET_GOVERNORATES_QUERY = """
query GetGovernorates($pageSize: Int) {
  governorates(pagination: { pageSize: $pageSize }) {
    documentId
    Name
    cities(pagination: { pageSize: $pageSize }) {
      documentId
      Name
    }
  }
}
"""
